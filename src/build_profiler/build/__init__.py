"""Build-step collaborators."""

from .runner import (
    MANUAL_BUILD_PROMPT,
    BuildOutcome,
    BuildStep,
    ManualBuildStep,
    ShellBuildStep,
    prompt_for_manual_build,
    run_build_command,
)

__all__ = [
    "BuildOutcome",
    "BuildStep",
    "MANUAL_BUILD_PROMPT",
    "ManualBuildStep",
    "ShellBuildStep",
    "prompt_for_manual_build",
    "run_build_command",
]
