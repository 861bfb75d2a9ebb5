"""CSV and console rendering of change sets."""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

from build_profiler.scan.models import ChangeRecord

CSV_HEADER = ("filepath", "last_modification_timestamp")


def format_timestamp(mtime_ns: int, fmt: str) -> str:
    """Render an mtime in local time."""
    return datetime.fromtimestamp(mtime_ns / 1_000_000_000).astimezone().strftime(fmt)


def render_csv(changes: Iterable[ChangeRecord], timestamp_format: str) -> str:
    """Render changes as a two-column CSV document with every value quoted."""
    buffer = io.StringIO()
    buffer.write(",".join(CSV_HEADER) + "\n")
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for change in changes:
        writer.writerow((change.path, format_timestamp(change.new_mtime_ns, timestamp_format)))
    return buffer.getvalue()


def write_csv(changes: Iterable[ChangeRecord], path: Path, timestamp_format: str) -> Path:
    """Write the CSV report atomically and return its path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        # Undecodable filename bytes come back from os.scandir as surrogate escapes.
        with tmp.open("w", encoding="utf-8", errors="surrogateescape", newline="") as handle:
            handle.write(render_csv(changes, timestamp_format))
        tmp.replace(path)
    finally:
        tmp.unlink(missing_ok=True)
    return path
