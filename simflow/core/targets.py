# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Target graph for the compile → simulate → view workflow.

The graph is a fixed linear chain derived from the unit under test:

    source (.v) → compiled image (.vvp) → waveform dump (.vcd) → view

plus the ``clean`` pseudo-target whose output is the whole build directory.
Targets are value objects rebuilt on every invocation; only their output
files outlive a run.

Usage:
    layout = BuildLayout.from_config(config)
    graph = TargetGraph(UnitUnderTest.parse("counter/counter_tb"), layout)
    chain = graph.resolve(TargetKind.WAVEFORM_DUMP)   # [image, dump]
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Any, Union

if TYPE_CHECKING:
    from simflow.settings import SimflowConfig


class TargetKind(str, Enum):
    COMPILED_IMAGE = "compiled-image"
    WAVEFORM_DUMP = "waveform-dump"
    LOG = "log"
    CLEAN = "clean"
    VIEW = "view"


class ActionKind(str, Enum):
    PRINT = "print"
    ENSURE_DIRECTORY = "ensure-directory"
    COMPILE = "compile"
    SIMULATE = "simulate"
    SIMULATE_INTERACTIVE = "simulate-interactive"
    VIEW = "view"
    REMOVE_TREE = "remove-tree"
    REMOVE_FILE = "remove-file"


@dataclass(frozen=True)
class Action:
    """One logical step of a recipe; the platform profile decides how it runs."""

    kind: ActionKind
    arguments: tuple[Any, ...] = ()

    def __str__(self) -> str:
        args = ", ".join(str(a) for a in self.arguments)
        return f"{self.kind.value}({args})"


@dataclass(frozen=True)
class BuildLayout:
    """Where sources live, where outputs go, and which extensions they use."""

    source_dir: Path
    build_dir: Path
    source_ext: str = ".v"
    image_ext: str = ".vvp"
    dump_ext: str = ".vcd"
    log_ext: str = ".log"

    @classmethod
    def from_config(cls, config: SimflowConfig) -> BuildLayout:
        return cls(
            source_dir=config.source_dir,
            build_dir=config.build_dir,
            source_ext=config.source_ext,
            image_ext=config.image_ext,
            dump_ext=config.dump_ext,
            log_ext=config.log_ext,
        )


@dataclass(frozen=True)
class UnitUnderTest:
    """Identifier of the top-level testbench: a relative path without extension."""

    name: str

    @classmethod
    def parse(cls, identifier: str, source_ext: str = ".v") -> UnitUnderTest:
        """Normalize a user-supplied identifier.

        Backslashes become forward slashes, a leading ``./`` and a trailing
        source extension are dropped.

        Raises:
            ValueError: If the identifier is empty, absolute, or escapes the
                source directory.
        """
        text = identifier.strip().replace("\\", "/")
        if source_ext and text.endswith(source_ext):
            text = text[: -len(source_ext)]
        path = PurePosixPath(text)
        if str(path) == "." or path.is_absolute() or ".." in path.parts:
            raise ValueError(f"invalid testbench identifier: {identifier!r}")
        # PurePosixPath collapses './' and duplicate slashes
        return cls(str(path))

    def source_path(self, layout: BuildLayout) -> Path:
        return layout.source_dir / f"{self.name}{layout.source_ext}"

    def output_path(self, layout: BuildLayout, ext: str) -> Path:
        return layout.build_dir / f"{self.name}{ext}"

    def __str__(self) -> str:
        return self.name


Dependency = Union["Target", Path, None]


@dataclass(frozen=True)
class Target:
    """A logical build product.

    Attributes:
        kind: Which product this is
        output: File (or, for clean, directory) the recipe produces
        dependency: Upstream Target, raw source file, or None
        recipe: Actions that regenerate the output
        phony: Always rebuilt; output is consumed rather than produced
    """

    kind: TargetKind
    output: Path
    dependency: Dependency = None
    recipe: tuple[Action, ...] = ()
    phony: bool = False

    @property
    def dependency_output(self) -> Path | None:
        """Path whose modification time this target is compared against."""
        if isinstance(self.dependency, Target):
            return self.dependency.output
        return self.dependency


class TargetGraph:
    """Fixed chain of targets for one unit under test."""

    def __init__(self, unit: UnitUnderTest, layout: BuildLayout):
        self.unit = unit
        self.layout = layout

        self.source = unit.source_path(layout)
        image_path = unit.output_path(layout, layout.image_ext)
        dump_path = unit.output_path(layout, layout.dump_ext)
        log_path = unit.output_path(layout, layout.log_ext)

        self.image = Target(
            kind=TargetKind.COMPILED_IMAGE,
            output=image_path,
            dependency=self.source,
            recipe=(
                Action(ActionKind.PRINT, ("# Compiling testbench:",)),
                Action(ActionKind.ENSURE_DIRECTORY, (image_path,)),
                Action(ActionKind.COMPILE, (self.source, image_path, dump_path, layout.source_dir)),
                Action(ActionKind.PRINT, ("",)),
            ),
        )

        # The previous dump is removed before simulating so that a dump left
        # over from an earlier run can never pass validation.
        self.dump = Target(
            kind=TargetKind.WAVEFORM_DUMP,
            output=dump_path,
            dependency=self.image,
            recipe=(
                Action(ActionKind.PRINT, ("# Simulating testbench:",)),
                Action(ActionKind.REMOVE_FILE, (dump_path,)),
                Action(ActionKind.SIMULATE, (image_path, log_path)),
                Action(ActionKind.PRINT, ("",)),
            ),
        )

        # Written as a side effect of the dump recipe
        self.log = Target(kind=TargetKind.LOG, output=log_path, dependency=self.image)

        self.view = Target(
            kind=TargetKind.VIEW,
            output=dump_path,
            dependency=self.dump,
            recipe=(
                Action(ActionKind.PRINT, ("# Opening dump file in GTKWave:",)),
                Action(ActionKind.VIEW, (dump_path,)),
                Action(ActionKind.PRINT, ("",)),
            ),
            phony=True,
        )

        self.clean = Target(
            kind=TargetKind.CLEAN,
            output=layout.build_dir,
            recipe=(
                Action(ActionKind.PRINT, ("# Removing build directory:",)),
                Action(ActionKind.REMOVE_TREE, (layout.build_dir,)),
                Action(ActionKind.PRINT, ("",)),
            ),
        )

    def resolve(self, kind: TargetKind) -> list[Target]:
        """Return the chain from the first buildable link down to ``kind``."""
        if kind is TargetKind.COMPILED_IMAGE:
            return [self.image]
        if kind in (TargetKind.WAVEFORM_DUMP, TargetKind.LOG):
            return [self.image, self.dump]
        if kind is TargetKind.VIEW:
            return [self.image, self.dump, self.view]
        if kind is TargetKind.CLEAN:
            return [self.clean]
        raise ValueError(f"Unknown target kind: {kind}")

    def interactive_recipe(self) -> tuple[Action, ...]:
        """Recipe for an interactive run; it produces no tracked output."""
        return (
            Action(ActionKind.PRINT, ("# Running interactive simulation:",)),
            Action(ActionKind.SIMULATE_INTERACTIVE, (self.image.output, self.log.output)),
            Action(ActionKind.PRINT, ("",)),
        )
