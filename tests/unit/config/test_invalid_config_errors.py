from __future__ import annotations

from pathlib import Path

import pytest

from build_profiler.config import MAX_WORKERS_CAP, CliOverrides, load_effective_config


def _write_config(root: Path, *lines: str) -> None:
    (root / "build_profiler.toml").write_text("\n".join(lines), encoding="utf-8")


def test_invalid_workers_type_raises_value_error(tmp_path: Path) -> None:
    _write_config(tmp_path, "[scan]", 'workers = "many"')

    with pytest.raises(ValueError, match="scan.workers"):
        load_effective_config(tmp_path)


def test_workers_above_cap_raises_value_error(tmp_path: Path) -> None:
    _write_config(tmp_path, "[scan]", f"workers = {MAX_WORKERS_CAP + 1}")

    with pytest.raises(ValueError, match=f"<= {MAX_WORKERS_CAP}"):
        load_effective_config(tmp_path)


def test_boolean_workers_is_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, "[scan]", "workers = true")

    with pytest.raises(ValueError, match="scan.workers"):
        load_effective_config(tmp_path)


def test_invalid_section_type_raises_value_error(tmp_path: Path) -> None:
    _write_config(tmp_path, 'scan = "not-a-table"')

    with pytest.raises(ValueError, match="section 'scan'"):
        load_effective_config(tmp_path)


def test_exclude_globs_must_be_strings(tmp_path: Path) -> None:
    _write_config(tmp_path, "[scan]", "exclude_globs = [1, 2]")

    with pytest.raises(ValueError, match="scan.exclude_globs"):
        load_effective_config(tmp_path)


def test_keep_snapshots_must_be_boolean(tmp_path: Path) -> None:
    _write_config(tmp_path, "[run]", 'keep_snapshots = "yes"')

    with pytest.raises(ValueError, match="run.keep_snapshots"):
        load_effective_config(tmp_path)


def test_empty_timestamp_format_is_rejected(tmp_path: Path) -> None:
    _write_config(tmp_path, "[output]", 'timestamp_format = ""')

    with pytest.raises(ValueError, match="output.timestamp_format"):
        load_effective_config(tmp_path)


def test_cli_override_workers_is_validated(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="overrides.workers"):
        load_effective_config(tmp_path, CliOverrides(workers=0))
