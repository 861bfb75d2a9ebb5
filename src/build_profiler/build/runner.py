"""Build-step execution between the two scans."""

from __future__ import annotations

import subprocess
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

MANUAL_BUILD_PROMPT = "Press Enter to continue after build..."


@dataclass(slots=True, frozen=True)
class BuildOutcome:
    """Result of the step that ran between the scans."""

    command: str | None
    exit_code: int
    elapsed_seconds: float

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class BuildStep(Protocol):
    """Anything that runs (or waits for) a build inside a directory."""

    @property
    def description(self) -> str: ...

    def __call__(self, cwd: Path) -> BuildOutcome: ...


def run_build_command(command: str, cwd: Path) -> BuildOutcome:
    """Run a shell build command inside cwd; output streams to the terminal."""
    started = time.perf_counter()
    completed = subprocess.run(command, shell=True, cwd=cwd, check=False)
    return BuildOutcome(
        command=command,
        exit_code=completed.returncode,
        elapsed_seconds=time.perf_counter() - started,
    )


def prompt_for_manual_build(
    cwd: Path,
    input_fn: Callable[[str], str] = input,
) -> BuildOutcome:
    """Wait for the user to run their build by hand; EOF counts as done."""
    started = time.perf_counter()
    try:
        input_fn(MANUAL_BUILD_PROMPT)
    except EOFError:
        pass
    return BuildOutcome(
        command=None,
        exit_code=0,
        elapsed_seconds=time.perf_counter() - started,
    )


@dataclass(slots=True, frozen=True)
class ShellBuildStep:
    """Build step backed by a shell command."""

    command: str

    @property
    def description(self) -> str:
        return f"Running build command: {self.command}"

    def __call__(self, cwd: Path) -> BuildOutcome:
        return run_build_command(self.command, cwd)


@dataclass(slots=True, frozen=True)
class ManualBuildStep:
    """Build step that pauses until the user confirms the build ran."""

    input_fn: Callable[[str], str] = input

    @property
    def description(self) -> str:
        return "Run your build process now."

    def __call__(self, cwd: Path) -> BuildOutcome:
        return prompt_for_manual_build(cwd, input_fn=self.input_fn)
