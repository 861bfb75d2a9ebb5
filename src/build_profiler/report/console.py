"""Plain-text console summary."""

from __future__ import annotations

from collections.abc import Sequence

from build_profiler.report.csv_report import format_timestamp
from build_profiler.scan.differ import summarize
from build_profiler.scan.models import ChangeRecord


def format_console_report(changes: Sequence[ChangeRecord], timestamp_format: str) -> str:
    summary = summarize(changes)
    lines = [
        f"{summary.total} file(s) changed: {summary.created} created, {summary.modified} modified."
    ]
    if not changes:
        return lines[0]
    width = max(len(change.kind.value) for change in changes)
    for change in changes:
        stamp = format_timestamp(change.new_mtime_ns, timestamp_format)
        lines.append(f"  {change.kind.value:<{width}}  {stamp}  {_printable(change.path)}")
    return "\n".join(lines)


def _printable(path: str) -> str:
    """Show undecodable filename bytes as \\x escapes."""
    return path.encode("utf-8", "surrogateescape").decode("utf-8", "backslashreplace")
