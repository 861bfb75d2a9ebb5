"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

CONFIG_FILE_NAME = "build_profiler.toml"
MAX_WORKERS_CAP = 64

DEFAULT_CSV_NAME = "build_profile.csv"
DEFAULT_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S %Z"
DEFAULT_DATA_DIR_NAME = ".build_profiler"


@dataclass(slots=True, frozen=True)
class ScanConfig:
    """Directory scan settings."""

    workers: int
    exclude_globs: tuple[str, ...]


@dataclass(slots=True, frozen=True)
class OutputConfig:
    """Report rendering settings."""

    csv_path: Path
    timestamp_format: str


@dataclass(slots=True, frozen=True)
class ProfilerConfig:
    """Fully merged profiler configuration."""

    target_dir: Path
    data_dir: Path
    keep_snapshots: bool
    scan: ScanConfig
    output: OutputConfig

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot for the run log."""
        return {
            "target_dir": str(self.target_dir),
            "data_dir": str(self.data_dir),
            "keep_snapshots": self.keep_snapshots,
            "scan": {
                "workers": self.scan.workers,
                "exclude_globs": list(self.scan.exclude_globs),
            },
            "output": {
                "csv_path": str(self.output.csv_path),
                "timestamp_format": self.output.timestamp_format,
            },
        }


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional command-line overrides applied at highest precedence."""

    csv_path: Path | None = None
    data_dir: Path | None = None
    workers: int | None = None
    timestamp_format: str | None = None
    keep_snapshots: bool | None = None


def default_config(target_dir: Path, cwd: Path | None = None) -> ProfilerConfig:
    """Build default config for a given target directory."""
    resolved_target = target_dir.resolve()
    working_dir = (cwd or Path.cwd()).resolve()
    return ProfilerConfig(
        target_dir=resolved_target,
        data_dir=resolved_target / DEFAULT_DATA_DIR_NAME,
        keep_snapshots=False,
        scan=ScanConfig(workers=1, exclude_globs=()),
        output=OutputConfig(
            csv_path=working_dir / DEFAULT_CSV_NAME,
            timestamp_format=DEFAULT_TIMESTAMP_FORMAT,
        ),
    )


def load_target_config_file(target_dir: Path) -> dict[str, object]:
    """Load optional build_profiler.toml from the target directory."""
    config_path = target_dir / CONFIG_FILE_NAME
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{CONFIG_FILE_NAME} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def _tuple_of_strings(value: object, section: str, field: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Config field '{section}.{field}' must be a list of strings.")
    output: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"Config field '{section}.{field}' must contain only strings.")
        output.append(item)
    return tuple(output)


def _optional_string(value: object, name: str, default: str) -> str:
    if value is None:
        return default
    if not isinstance(value, str) or not value:
        raise ValueError(f"Config field '{name}' must be a non-empty string.")
    return value


def _optional_bool(value: object, name: str, default: bool) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValueError(f"Config field '{name}' must be a boolean.")
    return value


def merge_config(
    base: ProfilerConfig, target_payload: dict[str, object], overrides: CliOverrides
) -> ProfilerConfig:
    """Merge defaults, target config file, then CLI overrides."""
    scan_payload = _get_table(target_payload, "scan")
    output_payload = _get_table(target_payload, "output")
    run_payload = _get_table(target_payload, "run")

    workers = _optional_positive_int_with_cap(
        scan_payload.get("workers"),
        "scan.workers",
        base.scan.workers,
        MAX_WORKERS_CAP,
    )
    exclude_globs = base.scan.exclude_globs
    if "exclude_globs" in scan_payload:
        exclude_globs = _tuple_of_strings(scan_payload["exclude_globs"], "scan", "exclude_globs")

    csv_path = base.output.csv_path
    if "csv_path" in output_payload:
        raw_csv_path = _optional_string(output_payload["csv_path"], "output.csv_path", "")
        csv_path = _anchor(Path(raw_csv_path), base.target_dir)
    timestamp_format = _optional_string(
        output_payload.get("timestamp_format"),
        "output.timestamp_format",
        base.output.timestamp_format,
    )

    data_dir = base.data_dir
    if "data_dir" in run_payload:
        raw_data_dir = _optional_string(run_payload["data_dir"], "run.data_dir", "")
        data_dir = _anchor(Path(raw_data_dir), base.target_dir)
    keep_snapshots = _optional_bool(
        run_payload.get("keep_snapshots"), "run.keep_snapshots", base.keep_snapshots
    )

    merged = ProfilerConfig(
        target_dir=base.target_dir,
        data_dir=data_dir,
        keep_snapshots=keep_snapshots,
        scan=ScanConfig(workers=workers, exclude_globs=exclude_globs),
        output=OutputConfig(csv_path=csv_path, timestamp_format=timestamp_format),
    )
    return apply_cli_overrides(merged, overrides)


def apply_cli_overrides(config: ProfilerConfig, overrides: CliOverrides) -> ProfilerConfig:
    """Apply command-line overrides at highest precedence."""
    workers = _optional_positive_int_with_cap(
        overrides.workers,
        "overrides.workers",
        config.scan.workers,
        MAX_WORKERS_CAP,
    )
    timestamp_format = _optional_string(
        overrides.timestamp_format,
        "overrides.timestamp_format",
        config.output.timestamp_format,
    )
    keep_snapshots = _optional_bool(
        overrides.keep_snapshots, "overrides.keep_snapshots", config.keep_snapshots
    )
    csv_path = overrides.csv_path or config.output.csv_path
    data_dir = overrides.data_dir or config.data_dir
    return ProfilerConfig(
        target_dir=config.target_dir,
        data_dir=data_dir.resolve(),
        keep_snapshots=keep_snapshots,
        scan=ScanConfig(workers=workers, exclude_globs=config.scan.exclude_globs),
        output=OutputConfig(csv_path=csv_path.resolve(), timestamp_format=timestamp_format),
    )


def load_effective_config(
    target_dir: Path,
    overrides: CliOverrides | None = None,
    cwd: Path | None = None,
) -> ProfilerConfig:
    """Load effective config using merge order defaults -> target config -> overrides."""
    resolved_target = target_dir.resolve()
    base = default_config(resolved_target, cwd=cwd)
    payload = load_target_config_file(resolved_target)
    return merge_config(base, payload, overrides or CliOverrides())


def _anchor(path: Path, target_dir: Path) -> Path:
    """Resolve config-file paths relative to the target directory."""
    if path.is_absolute():
        return path
    return target_dir / path


def _optional_positive_int_with_cap(
    value: object,
    name: str,
    default: int,
    cap: int | None,
) -> int:
    if value is None:
        return default
    if not isinstance(value, int) or isinstance(value, bool) or value < 1:
        raise ValueError(f"Config field '{name}' must be a positive integer.")
    if cap is not None and value > cap:
        raise ValueError(f"Config field '{name}' must be <= {cap}.")
    return value
