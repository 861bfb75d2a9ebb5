from __future__ import annotations

import json
from pathlib import Path

from build_profiler.logging import JsonlEventLogger


def test_event_log_writes_jsonl_schema(tmp_path: Path) -> None:
    logger = JsonlEventLogger(path=tmp_path / "data" / "events.jsonl", run_id="run-1")
    logger.emit("scan_finished", label="before", file_count=3)

    lines = logger.path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    event = json.loads(lines[0])

    assert set(event.keys()) == {"details", "event", "ok", "run_id", "timestamp"}
    assert event["run_id"] == "run-1"
    assert event["event"] == "scan_finished"
    assert event["ok"] is True
    assert event["details"] == {"file_count": 3, "label": "before"}
    assert event["timestamp"].endswith("Z")


def test_event_log_read_filters_by_run_and_limit(tmp_path: Path) -> None:
    path = tmp_path / "events.jsonl"
    first = JsonlEventLogger(path=path, run_id="first")
    second = JsonlEventLogger(path=path, run_id="second")
    for index in range(3):
        first.emit("scan_started", index=index)
    second.emit("run_failed", ok=False, error="boom")
    with path.open("a", encoding="utf-8") as handle:
        handle.write("not json\n\n")

    assert [entry["run_id"] for entry in first.read()] == ["first"] * 3 + ["second"]
    assert [entry["details"]["index"] for entry in first.read(run_id="first", limit=2)] == [1, 2]
    assert second.read(run_id="second")[0]["ok"] is False
    assert first.read(limit=0) == []


def test_generated_run_ids_differ(tmp_path: Path) -> None:
    path = tmp_path / "events.jsonl"
    assert JsonlEventLogger(path=path).run_id != JsonlEventLogger(path=path).run_id
