"""Command-line entrypoint."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Callable
from pathlib import Path
from typing import TextIO

from build_profiler.build import BuildStep, ManualBuildStep, ShellBuildStep
from build_profiler.config import DEFAULT_CSV_NAME, CliOverrides, load_effective_config
from build_profiler.errors import ProfilerError, TargetDirectoryError
from build_profiler.logging import JsonlEventLogger
from build_profiler.paths import resolve_target_dir
from build_profiler.profiler import BuildProfiler
from build_profiler.report import format_console_report

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130

_EPILOG = """\
examples:
  build-profiler                        profile the cwd, wait for a manual build
  build-profiler ./my_project_build_dir profile a directory, wait for a manual build
  build-profiler -b "make clean all"    profile the cwd, run 'make clean all'
  build-profiler /home/user/build -b ninja
                                        profile a directory, run 'ninja'
"""


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for a profiling run."""
    parser = argparse.ArgumentParser(
        prog="build-profiler",
        description=(
            "Profiles a build process by tracking file modifications before and after a build. "
            f"Writes a CSV ('{DEFAULT_CSV_NAME}' by default) with the modified or newly created "
            "files and their timestamps."
        ),
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "directory",
        nargs="?",
        default=None,
        help="directory to profile (default: current working directory)",
    )
    parser.add_argument("-o", "--output", default=None, help="CSV output path")
    parser.add_argument("-j", "--workers", type=int, default=None, help="scan worker threads")
    parser.add_argument("--data-dir", default=None, help="directory for the run log and snapshots")
    parser.add_argument("--timestamp-format", default=None, help="strftime format for the CSV")
    parser.add_argument(
        "--keep-snapshots",
        action="store_true",
        default=None,
        help="write both snapshots to the data directory",
    )
    parser.add_argument(
        "-b",
        dest="build_command",
        nargs=argparse.REMAINDER,
        default=None,
        help="build command to run between the scans; consumes the rest of the line",
    )
    return parser


def main(
    argv: list[str] | None = None,
    out_stream: TextIO | None = None,
    err_stream: TextIO | None = None,
    input_fn: Callable[[str], str] = input,
) -> int:
    """Entrypoint for the build profiler process."""
    out = out_stream or sys.stdout
    err = err_stream or sys.stderr
    arguments = list(sys.argv[1:] if argv is None else argv)
    parser = build_arg_parser()
    if arguments[:1] == ["help"]:
        parser.print_help(file=out)
        return EXIT_OK
    args = parser.parse_args(arguments)

    build_step: BuildStep
    if args.build_command is not None:
        command = " ".join(args.build_command).strip()
        if not command:
            parser.error("the -b option requires a build command")
        build_step = ShellBuildStep(command=command)
    else:
        build_step = ManualBuildStep(input_fn=input_fn)

    try:
        target_dir = resolve_target_dir(args.directory)
        overrides = CliOverrides(
            csv_path=Path(args.output).resolve() if args.output is not None else None,
            data_dir=Path(args.data_dir).resolve() if args.data_dir is not None else None,
            workers=args.workers,
            timestamp_format=args.timestamp_format,
            keep_snapshots=args.keep_snapshots,
        )
        config = load_effective_config(target_dir, overrides)
    except TargetDirectoryError as error:
        err.write(f"Error: {error.reason}\n{error.hint}\n")
        return EXIT_FAILURE
    except ValueError as error:
        err.write(f"Error: {error}\n")
        return EXIT_FAILURE

    out.write("--- Build Profiler ---\n")
    out.write(f"Target: {config.target_dir}\n")
    out.write(f"Output: {config.output.csv_path}\n\n")

    def _warn(message: str) -> None:
        err.write(f"WARNING: {message}\n")

    try:
        event_logger = JsonlEventLogger(path=config.data_dir / "events.jsonl")
    except OSError as error:
        err.write(f"Error: Cannot prepare data directory '{config.data_dir}': {error}\n")
        return EXIT_FAILURE
    profiler = BuildProfiler(config, event_logger=event_logger, on_warning=_warn, out_stream=out)
    try:
        result = profiler.run(build_step)
    except ProfilerError as error:
        err.write(f"Error: {error}\n")
        return EXIT_FAILURE
    except OSError as error:
        _log_failure(event_logger, profiler.stage.value, str(error), err)
        err.write(f"Error: Failed to write profiling results: {error}\n")
        return EXIT_FAILURE
    except KeyboardInterrupt:
        _log_failure(event_logger, profiler.stage.value, "interrupted", err)
        err.write("Interrupted; no results were written.\n")
        return EXIT_INTERRUPTED

    out.write("\n")
    out.write(format_console_report(result.changes, config.output.timestamp_format))
    out.write("\n")
    if result.csv_path is not None:
        out.write(f"Results written to {result.csv_path}\n")
    return EXIT_OK


def _log_failure(event_logger: JsonlEventLogger, stage: str, error: str, err: TextIO) -> None:
    # The event log lives in the data directory, which may be the thing that failed.
    try:
        event_logger.emit("run_failed", ok=False, stage=stage, error=error)
    except OSError as log_error:
        err.write(f"WARNING: Could not record failure in {event_logger.path}: {log_error}\n")
