# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Platform profile interface.

A PlatformProfile maps each logical action onto a concrete external
invocation. Exactly one profile is active per run; everything above this
layer (targets, staleness, validation) only talks to this interface.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from simflow.settings import SimflowConfig

logger = logging.getLogger(__name__)


class Stream(str, Enum):
    INHERIT = "inherit"
    NULL = "null"


@dataclass(frozen=True)
class Invocation:
    """A fully specified external command.

    Attributes:
        argv: Program followed by its arguments
        cwd: Working directory (None = current)
        stdin, stdout, stderr: Whether each stream is inherited or discarded
        detached: Start without waiting and survive the parent process
    """

    argv: tuple[str, ...]
    cwd: Path | None = None
    stdin: Stream = Stream.INHERIT
    stdout: Stream = Stream.INHERIT
    stderr: Stream = Stream.INHERIT
    detached: bool = False

    @property
    def program(self) -> str:
        return self.argv[0]


@dataclass(frozen=True)
class ToolSettings:
    """External tool names and options shared by every profile."""

    compiler: str = "iverilog"
    simulator: str = "vvp"
    viewer: str = "gtkwave"
    dump_macro: str = "DUMP_FILE"
    compiler_flags: tuple[str, ...] = ()
    cwd: Path | None = None

    @classmethod
    def from_config(cls, config: SimflowConfig) -> ToolSettings:
        return cls(
            compiler=config.compiler,
            simulator=config.simulator,
            viewer=config.viewer,
            dump_macro=config.dump_macro,
            compiler_flags=tuple(config.compiler_flags),
            cwd=config.project_dir,
        )


def _stream_target(stream: Stream) -> int | None:
    return subprocess.DEVNULL if stream is Stream.NULL else None


class PlatformProfile(ABC):
    """Base class for platform-specific command construction."""

    name: str = "abstract"

    def __init__(self, tools: ToolSettings | None = None):
        self.tools = tools or ToolSettings()

    # ------------------------------------------------------------------ #
    # External tools
    # ------------------------------------------------------------------ #

    def compile_invocation(
        self, source: Path, image: Path, dump: Path, include_dir: Path
    ) -> Invocation:
        """Compiler call with the dump path bound to the dump macro."""
        argv = (
            self.tools.compiler,
            self.dump_define(dump),
            "-I", self.path_arg(include_dir),
            "-grelative-include",
            *self.tools.compiler_flags,
            "-o", self.path_arg(image),
            self.path_arg(source),
        )
        return Invocation(argv=argv, cwd=self.tools.cwd)

    def simulate_invocation(self, image: Path, log: Path) -> Invocation:
        argv = (self.tools.simulator, "-n", "-l", self.path_arg(log), self.path_arg(image))
        return Invocation(
            argv=argv,
            cwd=self.tools.cwd,
            stdin=Stream.NULL,
            stdout=Stream.NULL,
        )

    def simulate_interactive_invocation(self, image: Path, log: Path) -> Invocation:
        argv = (self.tools.simulator, "-s", "-l", self.path_arg(log), self.path_arg(image))
        return Invocation(argv=argv, cwd=self.tools.cwd)

    def view_invocation(self, dump: Path) -> Invocation:
        return Invocation(
            argv=(self.tools.viewer, self.path_arg(dump)),
            cwd=self.tools.cwd,
            stdin=Stream.NULL,
            stdout=Stream.NULL,
            stderr=Stream.NULL,
            detached=True,
        )

    def dump_define(self, dump: Path) -> str:
        # The value lands in a Verilog string literal, where backslashes are
        # escapes, so it is always written with forward slashes.
        return f'-D{self.tools.dump_macro}="{dump.as_posix()}"'

    def path_arg(self, path: Path) -> str:
        return str(path)

    def popen_options(self, invocation: Invocation) -> dict[str, Any]:
        """Keyword arguments for subprocess.run / subprocess.Popen."""
        options: dict[str, Any] = {
            "cwd": str(invocation.cwd) if invocation.cwd else None,
            "stdin": _stream_target(invocation.stdin),
            "stdout": _stream_target(invocation.stdout),
            "stderr": _stream_target(invocation.stderr),
        }
        if invocation.detached:
            options.update(self.detach_options())
        return options

    @abstractmethod
    def detach_options(self) -> dict[str, Any]:
        """Options that let a child outlive this process."""

    @abstractmethod
    def format_command(self, argv: tuple[str, ...]) -> str:
        """Render argv the way this platform's shell would read it."""

    # ------------------------------------------------------------------ #
    # Local file actions (idempotent)
    # ------------------------------------------------------------------ #

    def ensure_directory(self, path: Path) -> None:
        """Create the parent directory of an output path."""
        path.parent.mkdir(parents=True, exist_ok=True)

    def remove_tree(self, path: Path) -> None:
        if path.is_dir() and not path.is_symlink():
            logger.info("Removing: %s", path)
            shutil.rmtree(path)
        elif path.exists() or path.is_symlink():
            path.unlink()

    def remove_file(self, path: Path) -> None:
        path.unlink(missing_ok=True)
