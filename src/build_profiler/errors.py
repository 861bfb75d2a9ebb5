"""Profiler error taxonomy."""

from __future__ import annotations


class ProfilerError(Exception):
    """Base class for fatal profiling failures."""


class TargetDirectoryError(ProfilerError):
    """Raised when the directory to profile cannot be used."""

    def __init__(self, reason: str, hint: str) -> None:
        super().__init__(reason)
        self.reason = reason
        self.hint = hint


class RootUnreadableError(ProfilerError):
    """Raised when the scan root cannot be opened or listed."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Cannot read directory '{path}': {reason}")
        self.path = path
        self.reason = reason


class ScanCancelledError(ProfilerError):
    """Raised when a scan is interrupted before it completes."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Scan of '{path}' was cancelled.")
        self.path = path


class DiffInputInvalidError(ProfilerError):
    """Raised when a snapshot handed to the differ is malformed."""

    def __init__(self, path: str, label: str) -> None:
        super().__init__(f"Duplicate path in {label} snapshot: {path}")
        self.path = path
        self.label = label


class SnapshotSchemaError(ProfilerError):
    """Raised when a stored snapshot uses an unsupported schema."""

    def __init__(self, found: int, expected: int) -> None:
        super().__init__(f"Unsupported snapshot schema {found}; expected {expected}.")
        self.found = found
        self.expected = expected
