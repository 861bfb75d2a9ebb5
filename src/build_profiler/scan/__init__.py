"""Directory snapshots and snapshot diffing."""

from .differ import diff, summarize
from .models import ChangeKind, ChangeRecord, ChangeSummary, FileRecord, Snapshot
from .scanner import WarningSink, scan, should_exclude
from .store import SNAPSHOT_SCHEMA_VERSION, read_snapshot, write_snapshot

__all__ = [
    "ChangeKind",
    "ChangeRecord",
    "ChangeSummary",
    "FileRecord",
    "SNAPSHOT_SCHEMA_VERSION",
    "Snapshot",
    "WarningSink",
    "diff",
    "read_snapshot",
    "scan",
    "should_exclude",
    "summarize",
    "write_snapshot",
]
