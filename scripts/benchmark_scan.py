#!/usr/bin/env python3
"""Benchmark directory scans across worker counts and check they agree."""

from __future__ import annotations

import argparse
import json
import statistics
import sys
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from build_profiler.scan import Snapshot, scan

DEFAULT_WORKERS = (1, 4, 8)


@dataclass(frozen=True, slots=True)
class FixtureProfile:
    """Size profile for a generated build-tree fixture."""

    directories: int
    files_per_directory: int
    depth: int


FIXTURE_PROFILES: dict[str, FixtureProfile] = {
    "small": FixtureProfile(directories=8, files_per_directory=16, depth=2),
    "large": FixtureProfile(directories=32, files_per_directory=64, depth=3),
}


@dataclass(slots=True)
class ScanRun:
    """One timed scan."""

    workers: int
    run_index: int
    elapsed_seconds: float
    file_count: int


def parse_workers(raw: str) -> list[int]:
    values: list[int] = []
    for item in raw.split(","):
        stripped = item.strip()
        if not stripped:
            continue
        try:
            value = int(stripped)
        except ValueError:
            raise SystemExit(f"Invalid worker count: {stripped!r}") from None
        if value < 1:
            raise SystemExit("Worker counts must be >= 1.")
        if value not in values:
            values.append(value)
    if not values:
        raise SystemExit("At least one worker count is required.")
    return values


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--target",
        default=None,
        help="Existing directory to scan. Defaults to a generated fixture.",
    )
    parser.add_argument(
        "--fixture",
        default="small",
        choices=sorted(FIXTURE_PROFILES),
        help="Generated fixture size when --target is omitted. Default: small.",
    )
    parser.add_argument(
        "--fixtures-root",
        default=".build_profiler/perf/fixtures",
        help="Where generated fixtures live.",
    )
    parser.add_argument(
        "--workers",
        default=",".join(str(value) for value in DEFAULT_WORKERS),
        help="Comma-separated worker counts. Default: 1,4,8.",
    )
    parser.add_argument("--runs", type=int, default=3, help="Runs per worker count. Default: 3.")
    parser.add_argument("--summary", default=None, help="Optional JSON summary output path.")
    return parser.parse_args()


def write_fixture_tree(root: Path, profile: FixtureProfile) -> int:
    """Write a nested tree of small object-like files and return the file count."""
    count = 0
    for dir_idx in range(profile.directories):
        directory = root
        for level in range(profile.depth):
            directory = directory / f"d{dir_idx:03d}_l{level}"
        directory.mkdir(parents=True, exist_ok=True)
        for file_idx in range(profile.files_per_directory):
            payload = b"\x7fELF" + bytes([file_idx % 256])
            (directory / f"unit_{file_idx:04d}.o").write_bytes(payload)
            count += 1
    return count


def ensure_fixture_tree(fixtures_root: Path, name: str) -> Path:
    root = fixtures_root / name
    marker = root / ".fixture.json"
    if marker.exists():
        return root
    profile = FIXTURE_PROFILES[name]
    root.mkdir(parents=True, exist_ok=True)
    file_count = write_fixture_tree(root, profile)
    marker.write_text(json.dumps({"fixture": name, "files": file_count}), encoding="utf-8")
    return root


def run_one(target: Path, workers: int, run_index: int) -> tuple[ScanRun, Snapshot]:
    started = time.perf_counter()
    snapshot = scan(target, workers=workers)
    elapsed = time.perf_counter() - started
    return (
        ScanRun(
            workers=workers,
            run_index=run_index,
            elapsed_seconds=elapsed,
            file_count=len(snapshot),
        ),
        snapshot,
    )


def _summarize_metric(values: list[float]) -> dict[str, float]:
    return {
        "min_seconds": min(values),
        "max_seconds": max(values),
        "mean_seconds": statistics.fmean(values),
    }


def main() -> int:
    args = parse_args()
    if args.runs < 1:
        raise SystemExit("--runs must be >= 1")
    worker_counts = parse_workers(args.workers)

    if args.target is not None:
        target = Path(args.target).resolve()
    else:
        target = ensure_fixture_tree(Path(args.fixtures_root).resolve(), args.fixture)

    runs: list[ScanRun] = []
    reference: Snapshot | None = None
    mismatches: list[int] = []
    for workers in worker_counts:
        for index in range(1, args.runs + 1):
            run, snapshot = run_one(target, workers, index)
            runs.append(run)
            if reference is None:
                reference = snapshot
            elif snapshot.records != reference.records:
                mismatches.append(workers)

    worker_metrics = {
        str(workers): _summarize_metric(
            [run.elapsed_seconds for run in runs if run.workers == workers]
        )
        for workers in worker_counts
    }
    file_count = len(reference) if reference is not None else 0
    summary: dict[str, object] = {
        "timestamp_utc": datetime.now(UTC).isoformat(),
        "target": str(target),
        "runs_per_worker_count": args.runs,
        "file_count": file_count,
        "workers": worker_metrics,
        "mismatched_worker_counts": sorted(set(mismatches)),
    }
    if args.summary is not None:
        summary_path = Path(args.summary).resolve()
        summary_path.parent.mkdir(parents=True, exist_ok=True)
        summary_path.write_text(json.dumps(summary, indent=2, sort_keys=True), encoding="utf-8")

    print("=== Scan Benchmark ===")
    print(f"target: {target}")
    print(f"files: {file_count}")
    for workers in worker_counts:
        metric = worker_metrics[str(workers)]
        print(
            f"workers={workers}: "
            f"mean={metric['mean_seconds']:.4f}s min={metric['min_seconds']:.4f}s"
        )
    if mismatches:
        print(f"snapshot mismatch for worker counts: {sorted(set(mismatches))}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
