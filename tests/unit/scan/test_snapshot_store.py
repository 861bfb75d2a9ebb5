from __future__ import annotations

import json
from pathlib import Path

import pytest

from build_profiler.errors import SnapshotSchemaError
from build_profiler.scan import FileRecord, Snapshot, read_snapshot, scan, write_snapshot


def test_snapshot_store_roundtrip(tmp_path: Path) -> None:
    tree = tmp_path / "tree"
    (tree / "sub").mkdir(parents=True)
    (tree / "a.o").write_text("a", encoding="utf-8")
    (tree / "sub" / "b o.o").write_text("b", encoding="utf-8")
    snapshot = scan(tree)
    path = tmp_path / "snapshots" / "before.jsonl"

    write_snapshot(snapshot, path)

    assert read_snapshot(path) == snapshot
    header = json.loads(path.read_text(encoding="utf-8").splitlines()[0])
    assert header == {"record_count": 2, "root": snapshot.root, "schema_version": 1}
    assert not path.with_suffix(".jsonl.tmp").exists()


def test_snapshot_store_rejects_unknown_schema(tmp_path: Path) -> None:
    path = tmp_path / "snap.jsonl"
    path.write_text(json.dumps({"schema_version": 9, "root": "/x"}) + "\n", encoding="utf-8")

    with pytest.raises(SnapshotSchemaError) as excinfo:
        read_snapshot(path)
    assert excinfo.value.found == 9
    assert excinfo.value.expected == 1


def test_snapshot_store_rejects_empty_file(tmp_path: Path) -> None:
    path = tmp_path / "snap.jsonl"
    path.write_text("", encoding="utf-8")

    with pytest.raises(SnapshotSchemaError):
        read_snapshot(path)


def test_snapshot_store_skips_malformed_rows(tmp_path: Path) -> None:
    path = tmp_path / "snap.jsonl"
    path.write_text(
        "\n".join(
            [
                json.dumps({"schema_version": 1, "root": "/proj", "record_count": 2}),
                json.dumps({"path": "/proj/b.o", "mtime_ns": 5}),
                "{not json",
                json.dumps({"path": "/proj/c.o", "mtime_ns": "5"}),
                json.dumps({"path": "/proj/a.o", "mtime_ns": 7}),
            ]
        )
        + "\n",
        encoding="utf-8",
    )

    assert read_snapshot(path) == Snapshot(
        root="/proj",
        records=(
            FileRecord(path="/proj/a.o", mtime_ns=7),
            FileRecord(path="/proj/b.o", mtime_ns=5),
        ),
    )
