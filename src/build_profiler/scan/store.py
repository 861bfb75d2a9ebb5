"""JSONL persistence for snapshots."""

from __future__ import annotations

import json
from pathlib import Path

from build_profiler.errors import SnapshotSchemaError
from build_profiler.scan.models import FileRecord, Snapshot

SNAPSHOT_SCHEMA_VERSION = 1


def write_snapshot(snapshot: Snapshot, path: Path) -> None:
    """Write a header line followed by one record per line, atomically."""
    path.parent.mkdir(parents=True, exist_ok=True)
    header = {
        "schema_version": SNAPSHOT_SCHEMA_VERSION,
        "root": snapshot.root,
        "record_count": len(snapshot),
    }
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        with tmp.open("w", encoding="utf-8") as handle:
            handle.write(json.dumps(header, sort_keys=True))
            handle.write("\n")
            for record in snapshot.records:
                handle.write(json.dumps({"path": record.path, "mtime_ns": record.mtime_ns}))
                handle.write("\n")
        tmp.replace(path)
    finally:
        tmp.unlink(missing_ok=True)


def read_snapshot(path: Path) -> Snapshot:
    """Load a snapshot written by ``write_snapshot``; malformed rows are skipped."""
    with path.open("r", encoding="utf-8") as handle:
        lines = [line.strip() for line in handle if line.strip()]
    if not lines:
        raise SnapshotSchemaError(found=-1, expected=SNAPSHOT_SCHEMA_VERSION)
    try:
        header = json.loads(lines[0])
    except json.JSONDecodeError:
        raise SnapshotSchemaError(found=-1, expected=SNAPSHOT_SCHEMA_VERSION) from None
    schema = header.get("schema_version") if isinstance(header, dict) else None
    if not isinstance(schema, int):
        raise SnapshotSchemaError(found=-1, expected=SNAPSHOT_SCHEMA_VERSION)
    if schema != SNAPSHOT_SCHEMA_VERSION:
        raise SnapshotSchemaError(found=schema, expected=SNAPSHOT_SCHEMA_VERSION)
    root = header.get("root")

    records: dict[str, FileRecord] = {}
    for line in lines[1:]:
        try:
            obj = json.loads(line)
        except json.JSONDecodeError:
            continue
        if not isinstance(obj, dict):
            continue
        record_path = obj.get("path")
        mtime_ns = obj.get("mtime_ns")
        if not isinstance(record_path, str):
            continue
        if not isinstance(mtime_ns, int) or isinstance(mtime_ns, bool):
            continue
        records[record_path] = FileRecord(path=record_path, mtime_ns=mtime_ns)
    return Snapshot.from_records(root if isinstance(root, str) else "", records.values())
