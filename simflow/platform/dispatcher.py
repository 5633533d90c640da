# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Execute recipe actions through the active platform profile.

External tools run one at a time and the dispatcher blocks on each of them,
except for the waveform viewer, which is started detached.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Callable, Iterable

from rich.console import Console

from simflow.core.exceptions import (
    BuildError,
    SimulationError,
    ToolError,
    ToolNotFoundError,
)
from simflow.core.targets import Action, ActionKind

from .base import Invocation, PlatformProfile

logger = logging.getLogger(__name__)


class CommandDispatcher:
    """Run logical actions and surface the exit status of external tools.

    Args:
        profile: Active platform profile
        console: Where user-visible lines go (defaults to a new Rich console)
        dry_run: Print commands instead of running them
    """

    def __init__(
        self,
        profile: PlatformProfile,
        console: Console | None = None,
        dry_run: bool = False,
    ):
        self.profile = profile
        self.console = console or Console()
        self.dry_run = dry_run

        self._handlers: dict[ActionKind, Callable[..., None]] = {
            ActionKind.PRINT: self.print,
            ActionKind.ENSURE_DIRECTORY: self.ensure_directory,
            ActionKind.COMPILE: self.compile,
            ActionKind.SIMULATE: self.simulate,
            ActionKind.SIMULATE_INTERACTIVE: self.simulate_interactive,
            ActionKind.VIEW: self.view,
            ActionKind.REMOVE_TREE: self.remove_tree,
            ActionKind.REMOVE_FILE: self.remove_file,
        }

    def execute(self, recipe: Iterable[Action]) -> None:
        """Run a recipe in order; the first failure aborts the rest."""
        for action in recipe:
            self.run(action)

    def run(self, action: Action) -> None:
        logger.debug("Action: %s", action)
        self._handlers[action.kind](*action.arguments)

    # ------------------------------------------------------------------ #
    # Logical actions
    # ------------------------------------------------------------------ #

    def print(self, message: str = "") -> None:
        self.console.print(message, markup=False, highlight=False)

    def ensure_directory(self, path: Path) -> None:
        if not self.dry_run:
            self.profile.ensure_directory(path)

    def compile(self, source: Path, image: Path, dump: Path, include_dir: Path) -> None:
        invocation = self.profile.compile_invocation(source, image, dump, include_dir)
        self._call(invocation, BuildError, "Compilation")

    def simulate(self, image: Path, log: Path) -> None:
        invocation = self.profile.simulate_invocation(image, log)
        self._call(invocation, SimulationError, "Simulation")

    def simulate_interactive(self, image: Path, log: Path) -> None:
        invocation = self.profile.simulate_interactive_invocation(image, log)
        self._call(invocation, SimulationError, "Interactive simulation", interactive=True)

    def view(self, dump: Path) -> None:
        invocation = self.profile.view_invocation(dump)
        self._echo(invocation)
        if self.dry_run:
            return

        try:
            process = subprocess.Popen(
                list(invocation.argv), **self.profile.popen_options(invocation)
            )
        except FileNotFoundError as e:
            raise self._not_found(invocation) from e
        logger.info("Started %s (pid %d)", invocation.program, process.pid)
        # The viewer outlives simflow and is never reaped here
        process.returncode = 0

    def remove_tree(self, path: Path) -> None:
        if not self.dry_run:
            self.profile.remove_tree(path)

    def remove_file(self, path: Path) -> None:
        if not self.dry_run:
            self.profile.remove_file(path)

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _echo(self, invocation: Invocation) -> None:
        command = self.profile.format_command(invocation.argv)
        logger.info("Running command %s in directory %s", command, invocation.cwd or ".")
        self.console.print(command, style="dim", markup=False, highlight=False)

    def _not_found(self, invocation: Invocation) -> ToolNotFoundError:
        return ToolNotFoundError(
            f"'{invocation.program}' executable not found",
            argv=invocation.argv,
            details=[
                f"Make sure '{invocation.program}' is installed and on your PATH",
                "Or point simflow at it with the matching SIMFLOW_* setting",
            ],
        )

    def _call(
        self,
        invocation: Invocation,
        error_cls: type[ToolError],
        what: str,
        interactive: bool = False,
    ) -> None:
        self._echo(invocation)
        if self.dry_run:
            return

        options = self.profile.popen_options(invocation)
        try:
            if interactive:
                returncode = _wait_attached(invocation, options)
            else:
                returncode = subprocess.run(list(invocation.argv), **options).returncode
        except FileNotFoundError as e:
            raise self._not_found(invocation) from e

        logger.debug("%s exited with code %d", invocation.program, returncode)
        if returncode != 0:
            raise error_cls(
                f"{what} failed (exit code {returncode})",
                argv=invocation.argv,
                returncode=returncode,
            )


def _wait_attached(invocation: Invocation, options: dict) -> int:
    """Run a terminal-attached child until it exits.

    Ctrl+C reaches the child through the terminal; the child decides what it
    means, so the parent keeps waiting instead of killing it.
    """
    process = subprocess.Popen(list(invocation.argv), **options)
    while True:
        try:
            return process.wait()
        except KeyboardInterrupt:
            logger.debug("Interrupt forwarded to %s", invocation.program)
