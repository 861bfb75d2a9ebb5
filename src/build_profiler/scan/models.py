"""Typed models for directory snapshots and change sets."""

from __future__ import annotations

from bisect import bisect_left
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum

from build_profiler.errors import DiffInputInvalidError


@dataclass(slots=True, frozen=True)
class FileRecord:
    """Modification signature of one regular file."""

    path: str
    mtime_ns: int


@dataclass(slots=True, frozen=True)
class Snapshot:
    """Point-in-time view of a tree, ordered by path."""

    root: str
    records: tuple[FileRecord, ...]

    @classmethod
    def from_records(cls, root: str, records: Iterable[FileRecord]) -> Snapshot:
        """Build a snapshot, sorting by path and rejecting duplicate paths."""
        ordered = sorted(records, key=lambda item: item.path)
        for previous, current in zip(ordered, ordered[1:]):
            if previous.path == current.path:
                raise DiffInputInvalidError(path=current.path, label="constructed")
        return cls(root=root, records=tuple(ordered))

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[FileRecord]:
        return iter(self.records)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and self.get(path) is not None

    def get(self, path: str) -> FileRecord | None:
        """Return the record for a path, if captured."""
        index = bisect_left(self.records, path, key=_record_path)
        if index < len(self.records) and self.records[index].path == path:
            return self.records[index]
        return None

    def paths(self) -> tuple[str, ...]:
        """Return captured paths in snapshot order."""
        return tuple(record.path for record in self.records)

    def as_dict(self) -> dict[str, int]:
        """Map path to mtime_ns."""
        return {record.path: record.mtime_ns for record in self.records}


def _record_path(record: FileRecord) -> str:
    return record.path


class ChangeKind(str, Enum):
    """Classification of a path that differs between two snapshots."""

    CREATED = "created"
    MODIFIED = "modified"


@dataclass(slots=True, frozen=True)
class ChangeRecord:
    """One created or modified file with its final mtime."""

    path: str
    new_mtime_ns: int
    kind: ChangeKind


@dataclass(slots=True, frozen=True)
class ChangeSummary:
    """Counts per change kind."""

    created: int
    modified: int

    @property
    def total(self) -> int:
        return self.created + self.modified
