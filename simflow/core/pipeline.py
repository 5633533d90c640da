# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""User-facing pipeline operations.

Each operation resolves a chain from the TargetGraph, asks the
StalenessResolver which links are stale, and runs their recipes through the
CommandDispatcher in dependency order. Any failure aborts the operation;
nothing is retried.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional

from .exceptions import SimulationError
from .staleness import StalenessResolver
from .targets import BuildLayout, Target, TargetGraph, TargetKind, UnitUnderTest
from .validator import DumpValidator

if TYPE_CHECKING:
    from rich.console import Console

    from simflow.platform import CommandDispatcher
    from simflow.settings import SimflowConfig

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """What an operation did."""

    operation: str
    executed: List[TargetKind] = field(default_factory=list)
    output: Optional[Path] = None

    @property
    def up_to_date(self) -> bool:
        return not self.executed


class Pipeline:
    """Compose graph, resolver, dispatcher and validator into operations."""

    def __init__(
        self,
        graph: TargetGraph,
        dispatcher: CommandDispatcher,
        resolver: StalenessResolver | None = None,
        validator: DumpValidator | None = None,
    ):
        self.graph = graph
        self.dispatcher = dispatcher
        self.resolver = resolver or StalenessResolver()
        self.validator = validator or DumpValidator()

    def compile(self) -> PipelineResult:
        return self._build("compile", TargetKind.COMPILED_IMAGE)

    def simulate(self) -> PipelineResult:
        return self._build("sim", TargetKind.WAVEFORM_DUMP)

    def simulate_interactive(self) -> PipelineResult:
        """Bring the image up to date, then hand the terminal to the simulator.

        The run may be aborted by the user on purpose, so the dump is never
        validated here.
        """
        result = self._build("simi", TargetKind.COMPILED_IMAGE)
        self.dispatcher.execute(self.graph.interactive_recipe())
        return result

    def view(self) -> PipelineResult:
        return self._build("wave", TargetKind.VIEW)

    def clean(self) -> PipelineResult:
        target = self.graph.clean
        if not self.resolver.is_stale(target):
            logger.info("Build directory %s does not exist", target.output)
        self.dispatcher.execute(target.recipe)
        return PipelineResult("clean", [TargetKind.CLEAN], target.output)

    def _build(self, operation: str, kind: TargetKind) -> PipelineResult:
        chain = self.graph.resolve(kind)
        plan = self.resolver.plan(chain)
        logger.info(
            "%s: %d of %d link(s) stale for %s",
            operation, len(plan), len(chain), self.graph.unit
        )

        result = PipelineResult(operation, output=chain[-1].output)
        for target in plan:
            self._run_target(target)
            result.executed.append(target.kind)

        if not plan:
            logger.debug("'%s' is up to date.", chain[-1].output)
        return result

    def _run_target(self, target: Target) -> None:
        if target.kind is not TargetKind.WAVEFORM_DUMP:
            self.dispatcher.execute(target.recipe)
            return

        try:
            self.dispatcher.execute(target.recipe)
        except (KeyboardInterrupt, SimulationError) as e:
            # A killed or failed simulation may leave a truncated dump behind;
            # drop it so the next run sees the dump as missing.
            reason = "interrupted" if isinstance(e, KeyboardInterrupt) else "failed"
            logger.warning("Simulation %s, removing %s", reason, target.output)
            self.dispatcher.remove_file(target.output)
            raise

        if not self.dispatcher.dry_run:
            self.validator.require(target.output)


def build_pipeline(
    config: SimflowConfig,
    unit: UnitUnderTest,
    console: Console | None = None,
    dry_run: bool = False,
) -> Pipeline:
    """Wire a pipeline from configuration.

    The build layout, tool settings and platform profile are derived once
    here and passed down explicitly.
    """
    from simflow.platform import CommandDispatcher, ToolSettings, select_profile

    layout = BuildLayout.from_config(config)
    profile = select_profile(config.platform, ToolSettings.from_config(config))
    dispatcher = CommandDispatcher(profile, console=console, dry_run=dry_run)

    return Pipeline(
        graph=TargetGraph(unit, layout),
        dispatcher=dispatcher,
        validator=DumpValidator(config.dump_macro),
    )
