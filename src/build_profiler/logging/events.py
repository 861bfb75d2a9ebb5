"""Structured JSONL run-event log."""

from __future__ import annotations

import json
import uuid
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path


@dataclass(slots=True, frozen=True)
class RunEvent:
    """One stage transition or diagnostic of a profiling run."""

    timestamp: str
    run_id: str
    event: str
    ok: bool
    details: dict[str, object]


def utc_timestamp() -> str:
    """Return an ISO-8601 UTC timestamp."""
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_run_id() -> str:
    return uuid.uuid4().hex[:12]


class JsonlEventLogger:
    """Append-only JSONL event logger and bounded reader."""

    def __init__(self, path: Path, run_id: str | None = None) -> None:
        self._path = path
        self._run_id = run_id or new_run_id()
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        """Return on-disk JSONL path."""
        return self._path

    @property
    def run_id(self) -> str:
        return self._run_id

    def emit(self, event: str, ok: bool = True, **details: object) -> RunEvent:
        """Build, append, and return an event for the current run."""
        record = RunEvent(
            timestamp=utc_timestamp(),
            run_id=self._run_id,
            event=event,
            ok=ok,
            details=dict(sorted(details.items())),
        )
        self.append(record)
        return record

    def append(self, event: RunEvent) -> None:
        """Append an event as one JSON object per line."""
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(asdict(event), sort_keys=True, default=str))
            handle.write("\n")

    def read(self, run_id: str | None = None, limit: int = 50) -> list[dict[str, object]]:
        """Read recent events, optionally restricted to one run."""
        if limit < 1:
            return []
        entries: list[dict[str, object]] = []
        if not self._path.exists():
            return entries
        with self._path.open("r", encoding="utf-8") as handle:
            for line in handle:
                stripped = line.strip()
                if not stripped:
                    continue
                try:
                    record = json.loads(stripped)
                except json.JSONDecodeError:
                    continue
                if run_id is not None and record.get("run_id") != run_id:
                    continue
                entries.append(record)
        if len(entries) <= limit:
            return entries
        return entries[-limit:]
