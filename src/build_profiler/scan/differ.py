"""Snapshot comparison producing created/modified change sets."""

from __future__ import annotations

from collections.abc import Iterable

from build_profiler.errors import DiffInputInvalidError
from build_profiler.scan.models import ChangeKind, ChangeRecord, ChangeSummary, Snapshot


def diff(before: Snapshot, after: Snapshot) -> tuple[ChangeRecord, ...]:
    """Classify every path of ``after`` against ``before``.

    Paths missing from ``before`` are created; paths whose mtime differs are
    modified. Unchanged paths and paths missing from ``after`` produce no
    record. Output is sorted by path.
    """
    previous = _index(before, label="before")
    current = _index(after, label="after")

    changes: list[ChangeRecord] = []
    for path in sorted(current):
        mtime_ns = current[path]
        prior = previous.get(path)
        if prior is None:
            changes.append(ChangeRecord(path=path, new_mtime_ns=mtime_ns, kind=ChangeKind.CREATED))
            continue
        if prior != mtime_ns:
            changes.append(
                ChangeRecord(path=path, new_mtime_ns=mtime_ns, kind=ChangeKind.MODIFIED)
            )
    return tuple(changes)


def summarize(changes: Iterable[ChangeRecord]) -> ChangeSummary:
    """Count created and modified records."""
    created = 0
    modified = 0
    for change in changes:
        if change.kind is ChangeKind.CREATED:
            created += 1
        else:
            modified += 1
    return ChangeSummary(created=created, modified=modified)


def _index(snapshot: Snapshot, label: str) -> dict[str, int]:
    output: dict[str, int] = {}
    for record in snapshot.records:
        if record.path in output:
            raise DiffInputInvalidError(path=record.path, label=label)
        output[record.path] = record.mtime_ns
    return output
