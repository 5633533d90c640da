# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Pipeline commands: compile, sim, simi, wave and clean.

Every command resolves the testbench first, so a missing or unknown
testbench fails before any tool runs.
"""

from __future__ import annotations  # PEP 563: Postponed evaluation of annotations

import logging
from typing import TYPE_CHECKING

import click

from ..context import ApplicationContext
from ..messages import DRY_RUN_NOTICE, NOTHING_TO_DO
from ..utils import console, success, warning

if TYPE_CHECKING:
    from simflow.core.pipeline import PipelineResult

logger = logging.getLogger(__name__)

_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def _report(ctx: ApplicationContext, result: PipelineResult, done: str | None = None) -> None:
    if ctx.dry_run:
        warning(DRY_RUN_NOTICE)
    elif result.up_to_date:
        console.print(NOTHING_TO_DO.format(operation=result.operation, output=result.output))
    elif done:
        success(done)


@click.command("compile", context_settings=_CONTEXT_SETTINGS)
@click.pass_obj
def compile_(ctx: ApplicationContext) -> None:
    """Compile the testbench into a simulation image."""
    result = ctx.get_pipeline().compile()
    _report(ctx, result, f"Compiled {result.output}")


@click.command(context_settings=_CONTEXT_SETTINGS)
@click.pass_obj
def sim(ctx: ApplicationContext) -> None:
    """Simulate the testbench, writing the waveform dump and log."""
    result = ctx.get_pipeline().simulate()
    _report(ctx, result, f"Waveform dump written to {result.output}")


@click.command(context_settings=_CONTEXT_SETTINGS)
@click.pass_obj
def simi(ctx: ApplicationContext) -> None:
    """\b
    Simulate interactively in this terminal.
    Ctrl+C reaches the simulator, which drops to its prompt.
    """
    ctx.get_pipeline().simulate_interactive()
    if ctx.dry_run:
        warning(DRY_RUN_NOTICE)


@click.command(context_settings=_CONTEXT_SETTINGS)
@click.pass_obj
def wave(ctx: ApplicationContext) -> None:
    """Open the waveform dump in GTKWave, simulating first if needed."""
    result = ctx.get_pipeline().view()
    _report(ctx, result)


@click.command(context_settings=_CONTEXT_SETTINGS)
@click.pass_obj
def clean(ctx: ApplicationContext) -> None:
    """Remove the build directory."""
    result = ctx.get_pipeline().clean()
    _report(ctx, result)
