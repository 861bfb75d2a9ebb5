"""Profiling run orchestration: scan, build, scan, diff, report."""

from __future__ import annotations

import sys
import threading
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TextIO

from build_profiler.build import BuildOutcome, BuildStep
from build_profiler.config import ProfilerConfig
from build_profiler.errors import ProfilerError
from build_profiler.logging import JsonlEventLogger, new_run_id
from build_profiler.paths import internal_exclude_globs
from build_profiler.report import write_csv
from build_profiler.scan import ChangeRecord, Snapshot, WarningSink, diff, scan, summarize
from build_profiler.scan.store import write_snapshot


class ProfileStage(str, Enum):
    """Workflow position of a profiling run."""

    IDLE = "idle"
    SCANNED_BEFORE = "scanned_before"
    BUILD_RAN = "build_ran"
    SCANNED_AFTER = "scanned_after"
    DIFFED = "diffed"
    REPORTED = "reported"


@dataclass(slots=True, frozen=True)
class ProfileResult:
    """Outcome of one completed profiling run."""

    run_id: str
    target_dir: Path
    changes: tuple[ChangeRecord, ...]
    build: BuildOutcome
    before_count: int
    after_count: int
    warnings: tuple[str, ...]
    csv_path: Path | None
    timings: dict[str, float]


class BuildProfiler:
    """Runs the before/after scan workflow around a build step."""

    def __init__(
        self,
        config: ProfilerConfig,
        event_logger: JsonlEventLogger | None = None,
        on_warning: WarningSink | None = None,
        out_stream: TextIO | None = None,
        cancel: threading.Event | None = None,
    ) -> None:
        self._config = config
        self._event_logger = event_logger
        self._on_warning = on_warning
        self._out = out_stream or sys.stdout
        self._cancel = cancel
        self._run_id = event_logger.run_id if event_logger is not None else new_run_id()
        self._warnings: list[str] = []
        self._stage = ProfileStage.IDLE
        self._exclude_globs = config.scan.exclude_globs + internal_exclude_globs(
            config.target_dir,
            (
                config.data_dir,
                config.data_dir / "events.jsonl",
                config.data_dir / "snapshots",
                config.output.csv_path,
                config.output.csv_path.with_suffix(config.output.csv_path.suffix + ".tmp"),
            ),
        )

    @property
    def stage(self) -> ProfileStage:
        return self._stage

    @property
    def exclude_globs(self) -> tuple[str, ...]:
        return self._exclude_globs

    def run(self, build_step: BuildStep, write_report: bool = True) -> ProfileResult:
        """Execute the full workflow and return the change set."""
        try:
            return self._run(build_step, write_report)
        except ProfilerError as error:
            self._emit("run_failed", ok=False, stage=self._stage.value, error=str(error))
            raise

    def _run(self, build_step: BuildStep, write_report: bool) -> ProfileResult:
        started = time.perf_counter()
        target = self._config.target_dir
        self._emit("run_started", config=self._config.to_public_dict())

        self._print("STEP 1/3: Initial scan...")
        before_started = time.perf_counter()
        before = self._scan("before")
        before_seconds = time.perf_counter() - before_started
        self._stage = ProfileStage.SCANNED_BEFORE

        self._print(f"STEP 2/3: {build_step.description}")
        build = build_step(target)
        self._stage = ProfileStage.BUILD_RAN
        self._emit(
            "build_finished",
            ok=build.ok,
            command=build.command,
            exit_code=build.exit_code,
            elapsed_seconds=build.elapsed_seconds,
        )
        if not build.ok:
            self._warn(
                f"Build command exited with status {build.exit_code}. "
                "Profiling continues, but results might reflect an incomplete build."
            )
        elif build.command is not None:
            self._print("Build completed.")

        self._print("STEP 3/3: Final scan...")
        after_started = time.perf_counter()
        after = self._scan("after")
        after_seconds = time.perf_counter() - after_started
        self._stage = ProfileStage.SCANNED_AFTER

        changes = diff(before, after)
        self._stage = ProfileStage.DIFFED
        summary = summarize(changes)
        self._emit("diff_finished", created=summary.created, modified=summary.modified)

        csv_path: Path | None = None
        if write_report:
            csv_path = write_csv(
                changes,
                self._config.output.csv_path,
                self._config.output.timestamp_format,
            )
            self._emit("report_written", path=str(csv_path), rows=len(changes))
        self._stage = ProfileStage.REPORTED

        return ProfileResult(
            run_id=self._run_id,
            target_dir=target,
            changes=changes,
            build=build,
            before_count=len(before),
            after_count=len(after),
            warnings=tuple(self._warnings),
            csv_path=csv_path,
            timings={
                "before_scan_seconds": before_seconds,
                "build_seconds": build.elapsed_seconds,
                "after_scan_seconds": after_seconds,
                "total_seconds": time.perf_counter() - started,
            },
        )

    def _scan(self, label: str) -> Snapshot:
        target = self._config.target_dir
        self._emit("scan_started", label=label, target=str(target))
        snapshot = scan(
            target,
            workers=self._config.scan.workers,
            exclude_globs=self._exclude_globs,
            on_warning=self._warn_skipped,
            cancel=self._cancel,
        )
        self._emit("scan_finished", label=label, file_count=len(snapshot))
        if self._config.keep_snapshots:
            snapshot_path = self._config.data_dir / "snapshots" / f"{self._run_id}-{label}.jsonl"
            write_snapshot(snapshot, snapshot_path)
        return snapshot

    def _warn_skipped(self, message: str) -> None:
        self._emit("file_skipped", ok=False, message=message)
        self._warn(message)

    def _warn(self, message: str) -> None:
        self._warnings.append(message)
        if self._on_warning is not None:
            self._on_warning(message)

    def _emit(self, event: str, ok: bool = True, **details: object) -> None:
        if self._event_logger is None:
            return
        self._event_logger.emit(event, ok=ok, **details)

    def _print(self, message: str) -> None:
        self._out.write(message + "\n")
        self._out.flush()


def profile_build(
    config: ProfilerConfig,
    build_step: BuildStep,
    *,
    event_logger: JsonlEventLogger | None = None,
    on_warning: WarningSink | None = None,
    out_stream: TextIO | None = None,
    cancel: threading.Event | None = None,
    write_report: bool = True,
) -> ProfileResult:
    """Run one profiling pass with the given build step."""
    profiler = BuildProfiler(
        config,
        event_logger=event_logger,
        on_warning=on_warning,
        out_stream=out_stream,
        cancel=cancel,
    )
    return profiler.run(build_step, write_report=write_report)
