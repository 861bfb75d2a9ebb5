from __future__ import annotations

import os
from pathlib import Path

import pytest

from build_profiler.errors import DiffInputInvalidError
from build_profiler.scan import (
    ChangeKind,
    ChangeRecord,
    FileRecord,
    Snapshot,
    diff,
    scan,
    summarize,
)

SECOND = 1_000_000_000


def _snapshot(*pairs: tuple[str, int]) -> Snapshot:
    return Snapshot.from_records("/proj", (FileRecord(path=p, mtime_ns=m) for p, m in pairs))


def test_documented_scenario_reports_modified_then_created() -> None:
    before = _snapshot(("/proj/a.txt", 100), ("/proj/b.txt", 100))
    after = _snapshot(("/proj/a.txt", 200), ("/proj/b.txt", 100), ("/proj/c.txt", 150))

    assert diff(before, after) == (
        ChangeRecord(path="/proj/a.txt", new_mtime_ns=200, kind=ChangeKind.MODIFIED),
        ChangeRecord(path="/proj/c.txt", new_mtime_ns=150, kind=ChangeKind.CREATED),
    )


def test_deleted_paths_produce_no_record() -> None:
    before = _snapshot(("/proj/keep.o", 1), ("/proj/drop.o", 1))
    after = _snapshot(("/proj/keep.o", 1))

    assert diff(before, after) == ()


def test_mtime_comparison_is_exact() -> None:
    before = _snapshot(("/proj/a.o", 100 * SECOND))
    after = _snapshot(("/proj/a.o", 100 * SECOND + 1))

    changes = diff(before, after)

    assert changes == (
        ChangeRecord(path="/proj/a.o", new_mtime_ns=100 * SECOND + 1, kind=ChangeKind.MODIFIED),
    )


def test_older_mtime_still_counts_as_modified() -> None:
    before = _snapshot(("/proj/a.o", 500))
    after = _snapshot(("/proj/a.o", 400))

    assert [change.kind for change in diff(before, after)] == [ChangeKind.MODIFIED]


def test_output_is_sorted_regardless_of_input_order() -> None:
    unsorted_after = Snapshot(
        root="/proj",
        records=(
            FileRecord(path="/proj/z.o", mtime_ns=1),
            FileRecord(path="/proj/a.o", mtime_ns=1),
            FileRecord(path="/proj/m/k.o", mtime_ns=1),
        ),
    )
    empty = Snapshot(root="/proj", records=())

    assert [change.path for change in diff(empty, unsorted_after)] == [
        "/proj/a.o",
        "/proj/m/k.o",
        "/proj/z.o",
    ]


def test_duplicate_path_in_snapshot_is_rejected() -> None:
    malformed = Snapshot(
        root="/proj",
        records=(
            FileRecord(path="/proj/a.o", mtime_ns=1),
            FileRecord(path="/proj/a.o", mtime_ns=2),
        ),
    )
    empty = Snapshot(root="/proj", records=())

    with pytest.raises(DiffInputInvalidError) as excinfo:
        diff(empty, malformed)
    assert excinfo.value.path == "/proj/a.o"
    assert excinfo.value.label == "after"

    with pytest.raises(DiffInputInvalidError) as excinfo:
        diff(malformed, empty)
    assert excinfo.value.label == "before"


def test_from_records_sorts_and_rejects_duplicates() -> None:
    snapshot = _snapshot(("/proj/b", 1), ("/proj/a", 2))
    assert snapshot.paths() == ("/proj/a", "/proj/b")
    assert snapshot.as_dict() == {"/proj/a": 2, "/proj/b": 1}
    assert "/proj/a" in snapshot
    assert "/proj/c" not in snapshot
    assert snapshot.get("/proj/c") is None

    with pytest.raises(DiffInputInvalidError):
        _snapshot(("/proj/a", 1), ("/proj/a", 1))


def test_summarize_counts_kinds() -> None:
    before = _snapshot(("/proj/a", 1), ("/proj/b", 1))
    after = _snapshot(("/proj/a", 2), ("/proj/b", 1), ("/proj/c", 1), ("/proj/d", 1))

    summary = summarize(diff(before, after))

    assert summary.created == 2
    assert summary.modified == 1
    assert summary.total == 3


def test_scanned_tree_scenario(tmp_path: Path) -> None:
    a = tmp_path / "a.txt"
    b = tmp_path / "b.txt"
    a.write_text("a v1", encoding="utf-8")
    b.write_text("b v1", encoding="utf-8")
    os.utime(a, ns=(100 * SECOND, 100 * SECOND))
    os.utime(b, ns=(100 * SECOND, 100 * SECOND))
    before = scan(tmp_path)

    a.write_text("a v2", encoding="utf-8")
    os.utime(a, ns=(200 * SECOND, 200 * SECOND))
    c = tmp_path / "c.txt"
    c.write_text("c", encoding="utf-8")
    os.utime(c, ns=(150 * SECOND, 150 * SECOND))
    after = scan(tmp_path)

    root = tmp_path.resolve()
    assert [(change.path, change.new_mtime_ns, change.kind) for change in diff(before, after)] == [
        (str(root / "a.txt"), 200 * SECOND, ChangeKind.MODIFIED),
        (str(root / "c.txt"), 150 * SECOND, ChangeKind.CREATED),
    ]


def test_deleted_file_between_scans_is_absent_not_an_error(tmp_path: Path) -> None:
    (tmp_path / "keep.o").write_text("keep", encoding="utf-8")
    drop = tmp_path / "drop.o"
    drop.write_text("drop", encoding="utf-8")
    before = scan(tmp_path)

    drop.unlink()
    after = scan(tmp_path)

    assert diff(before, after) == ()


def test_snapshot_lookup_by_path() -> None:
    snapshot = Snapshot.from_records(
        "/proj",
        [FileRecord("/proj/c", 3), FileRecord("/proj/a", 1), FileRecord("/proj/b", 2)],
    )

    assert snapshot.get("/proj/b") == FileRecord("/proj/b", 2)
    assert snapshot.get("/proj/bb") is None
    assert snapshot.get("/proj/z") is None
    assert "/proj/a" in snapshot
    assert "/proj/d" not in snapshot
    assert 1 not in snapshot
