"""Deterministic directory scanning for build profiling."""

from __future__ import annotations

import fnmatch
import os
import threading
from collections.abc import Callable, Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from functools import partial
from pathlib import Path

from build_profiler.errors import RootUnreadableError, ScanCancelledError
from build_profiler.scan.models import FileRecord, Snapshot

WarningSink = Callable[[str], None]


@dataclass(slots=True, frozen=True)
class _DirectoryListing:
    """Regular files, subdirectories, and skip warnings for one directory."""

    files: tuple[FileRecord, ...]
    subdirs: tuple[Path, ...]
    warnings: tuple[str, ...]
    error: str | None = None


_Mapper = Callable[
    [Callable[[Path], _DirectoryListing], Iterable[Path]], Iterator[_DirectoryListing]
]


def scan(
    root: Path | str,
    *,
    workers: int = 1,
    exclude_globs: tuple[str, ...] = (),
    on_warning: WarningSink | None = None,
    cancel: threading.Event | None = None,
) -> Snapshot:
    """Capture the mtime of every regular file under root.

    Symlinks are never followed or recorded. Files and subdirectories that
    cannot be read are skipped and reported through ``on_warning``; an
    unreadable root raises ``RootUnreadableError``. The returned snapshot is
    sorted by path and identical for any ``workers`` value.
    """
    if workers < 1:
        raise ValueError("workers must be a positive integer.")
    resolved = Path(root).resolve()
    warn = on_warning or _discard_warning
    if workers == 1:
        return _walk(resolved, exclude_globs, map, warn, cancel)
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="scan") as executor:
        return _walk(resolved, exclude_globs, executor.map, warn, cancel)


def should_exclude(relative_path: str, exclude_globs: tuple[str, ...]) -> bool:
    """Return True when a root-relative path matches any exclude glob."""
    anchored = f"/{relative_path}"
    return any(
        fnmatch.fnmatch(relative_path, pattern) or fnmatch.fnmatch(anchored, pattern)
        for pattern in exclude_globs
    )


def _walk(
    root: Path,
    exclude_globs: tuple[str, ...],
    mapper: _Mapper,
    warn: WarningSink,
    cancel: threading.Event | None,
) -> Snapshot:
    """Walk level by level; warnings are emitted in path order from this thread."""
    records: dict[str, FileRecord] = {}
    list_directory = partial(_list_directory, root, exclude_globs, cancel)
    frontier: list[Path] = [root]
    while frontier:
        _check_cancel(root, cancel)
        next_frontier: list[Path] = []
        for directory, listing in zip(frontier, mapper(list_directory, frontier)):
            _check_cancel(root, cancel)
            if listing.error is not None:
                if directory == root:
                    raise RootUnreadableError(path=str(root), reason=listing.error)
                warn(f"Skipping unreadable directory: {directory} ({listing.error})")
                continue
            for message in listing.warnings:
                warn(message)
            for record in listing.files:
                records[record.path] = record
            next_frontier.extend(listing.subdirs)
        frontier = sorted(next_frontier)
    return Snapshot.from_records(str(root), records.values())


def _list_directory(
    root: Path,
    exclude_globs: tuple[str, ...],
    cancel: threading.Event | None,
    directory: Path,
) -> _DirectoryListing:
    if cancel is not None and cancel.is_set():
        return _DirectoryListing(files=(), subdirs=(), warnings=())
    try:
        with os.scandir(directory) as entries:
            ordered_entries = sorted(entries, key=lambda item: item.name)
    except OSError as error:
        return _DirectoryListing(files=(), subdirs=(), warnings=(), error=_describe(error))

    files: list[FileRecord] = []
    subdirs: list[Path] = []
    warnings: list[str] = []
    for entry in ordered_entries:
        relative = Path(entry.path).relative_to(root).as_posix()
        try:
            if entry.is_symlink():
                continue
            if entry.is_dir(follow_symlinks=False):
                if exclude_globs and (
                    should_exclude(relative, exclude_globs)
                    or should_exclude(f"{relative}/", exclude_globs)
                ):
                    continue
                subdirs.append(Path(entry.path))
                continue
            if not entry.is_file(follow_symlinks=False):
                continue
            if exclude_globs and should_exclude(relative, exclude_globs):
                continue
            stat = entry.stat(follow_symlinks=False)
        except OSError as error:
            warnings.append(f"Could not stat file: {entry.path} ({_describe(error)})")
            continue
        files.append(FileRecord(path=entry.path, mtime_ns=stat.st_mtime_ns))
    return _DirectoryListing(files=tuple(files), subdirs=tuple(subdirs), warnings=tuple(warnings))


def _check_cancel(root: Path, cancel: threading.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise ScanCancelledError(path=str(root))


def _describe(error: OSError) -> str:
    return error.strerror or str(error)


def _discard_warning(message: str) -> None:
    pass
