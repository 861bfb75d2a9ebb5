"""Target directory resolution and validation."""

from __future__ import annotations

import glob
from pathlib import Path

from build_profiler.errors import TargetDirectoryError


def resolve_target_dir(candidate: str | Path | None, cwd: Path | None = None) -> Path:
    """Resolve the directory to profile to an absolute path and validate it."""
    base = (cwd or Path.cwd()).resolve()
    raw = str(candidate) if candidate is not None else ""
    if not raw.strip():
        return base

    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = base / path
    try:
        resolved = path.resolve(strict=True)
    except (OSError, RuntimeError):
        raise TargetDirectoryError(
            reason=f"Directory '{path}' does not exist or is not a directory.",
            hint="Pass an existing directory, or omit it to profile the current directory.",
        ) from None
    if not resolved.is_dir():
        raise TargetDirectoryError(
            reason=f"Directory '{resolved}' does not exist or is not a directory.",
            hint="Pass an existing directory, or omit it to profile the current directory.",
        )
    return resolved


def internal_exclude_globs(target_dir: Path, internal_paths: tuple[Path, ...]) -> tuple[str, ...]:
    """Build exclude globs that keep profiler-owned paths under the target out of scans."""
    output: list[str] = []
    root = target_dir.resolve()
    for candidate in internal_paths:
        resolved = candidate.resolve()
        if resolved == root or not resolved.is_relative_to(root):
            continue
        prefix = glob.escape(resolved.relative_to(root).as_posix())
        output.append(prefix)
        output.append(f"{prefix}/*")
    return tuple(output)
