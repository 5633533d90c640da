# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Exception hierarchy for simflow.

Every fatal condition in the pipeline is raised as a subclass of
SimflowError so the CLI can report it consistently and map it to an exit
code without knowing where it came from.
"""

from __future__ import annotations

from collections.abc import Sequence


# BSD sysexits.h values, duplicated here so core code does not import the CLI
EX_TOOL_FAILURE = 1
EX_USAGE = 64
EX_DATAERR = 65
EX_CONFIG = 78


class SimflowError(Exception):
    """Base exception for all simflow errors.

    Attributes:
        message: Main error message
        details: Optional list of additional detail lines
        exit_code: Suggested exit code for this error type (class attribute)
    """

    exit_code: int = EX_USAGE

    def __init__(self, message: str, details: Sequence[str] | None = None):
        self.message = message
        self.details = list(details or [])
        super().__init__(message)

    def format_for_console(self) -> str:
        """Format error message with its detail lines as Rich markup."""
        lines = [f"[red]Error:[/red] {self.message}"]
        if self.details:
            lines.append("")
            for detail in self.details:
                lines.append(f"  • {detail}")
        return "\n".join(lines)


class ConfigurationError(SimflowError):
    """Unit under test unresolved, or its source file is missing."""

    exit_code = EX_CONFIG


class OverrideFileError(ConfigurationError):
    """Malformed line in the key/value override file."""


class ToolError(SimflowError):
    """An external tool failed.

    Attributes:
        argv: The command that was run
        returncode: Exit status of the process (None if it never started)
    """

    exit_code = EX_TOOL_FAILURE

    def __init__(
        self,
        message: str,
        argv: Sequence[str] = (),
        returncode: int | None = None,
        details: Sequence[str] | None = None,
    ):
        super().__init__(message, details)
        self.argv = list(argv)
        self.returncode = returncode


class BuildError(ToolError):
    """The compiler exited with a non-zero status."""


class SimulationError(ToolError):
    """The simulator exited with a non-zero status."""


class ToolNotFoundError(ToolError):
    """The executable for an action is not on PATH."""

    exit_code = EX_CONFIG


class MissingArtifactError(SimflowError):
    """The simulator exited cleanly but produced no waveform dump."""

    exit_code = EX_DATAERR
