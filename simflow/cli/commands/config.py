# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

from __future__ import annotations  # PEP 563: Postponed evaluation of annotations

import logging
from pathlib import Path
from textwrap import dedent
from typing import TYPE_CHECKING

import click
import yaml

from simflow.core.exceptions import ConfigurationError

from ..context import ApplicationContext
from ..formatters import ConfigFormatter
from ..messages import CONFIG_EDIT_HINT
from ..utils import console, success, tip

logger = logging.getLogger(__name__)

# Lazy import settings - deferred until command actually runs
if TYPE_CHECKING:
    from simflow.settings import SimflowConfig


def _generate_config_template(defaults: SimflowConfig, testbench: str | None) -> str:
    testbench_line = (
        f"TESTBENCH ?= {testbench}" if testbench else "# TESTBENCH ?= path/to/testbench"
    )
    return dedent(f"""\
        # simflow override file
        # Relative paths resolve to the directory containing this file

        # Testbench to build, relative to SOURCE_DIR and without extension
        {testbench_line}

        # Source and build directories
        SOURCE_DIR ?= {defaults.source_dir.name}
        BUILD_DIR ?= {defaults.build_dir.name}

        # Tools (names on PATH or absolute paths)
        COMPILER ?= {defaults.compiler}
        SIMULATOR ?= {defaults.simulator}
        VIEWER ?= {defaults.viewer}

        # Extra compiler arguments, shell-quoted
        # COMPILER_FLAGS ?= -g2012 -Wall

        # Console verbosity: quiet | normal | verbose | debug
        # LOG_LEVEL ?= {defaults.logging.level}
    """)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
def config():
    """\b
    Configuration can be managed by editing the override file directly:
      Project: ./simflow.mk
    """
    pass


@config.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--yaml", "as_yaml", is_flag=True, help="Print the effective configuration as YAML")
@click.pass_obj
def show(ctx: ApplicationContext, as_yaml: bool) -> None:
    """Display current configuration with source information."""
    logger.debug("Showing config with yaml=%s", as_yaml)
    config = ctx.get_effective_config()

    if as_yaml:
        data = config.model_dump(mode="json")
        click.echo(yaml.safe_dump(data, sort_keys=False, default_flow_style=False), nl=False)
        return

    formatter = ConfigFormatter(console, cli_keys=ctx.overrides)
    console.print(formatter.format_metadata(config))
    console.print(formatter.format_table(config))


@config.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--force", "-f", is_flag=True, help="Overwrite existing file")
@click.option("--testbench", "-t", metavar="PATH", help="Prefill the testbench to build")
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Where to write the file (default: ./simflow.mk)",
)
@click.pass_obj
def init(ctx: ApplicationContext, force: bool, testbench: str | None, output: Path | None) -> None:
    """Create an override file in the current directory."""
    from simflow.settings import OVERRIDE_FILE_NAME, get_default_config
    from simflow.settings.validation import validate_config_file_creation

    output = output or Path(OVERRIDE_FILE_NAME)
    validate_config_file_creation(output, force)

    # Defaults only, without reading existing override files or environment
    defaults = get_default_config()
    content = _generate_config_template(defaults, testbench or ctx.overrides.get("testbench"))

    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(content, encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Failed to create configuration: {e}") from e

    success(f"Created configuration file: {output}")
    console.print(f"[dim]{CONFIG_EDIT_HINT}[/dim]")
    if not (testbench or ctx.overrides.get("testbench")):
        tip("Uncomment TESTBENCH and point it at your testbench")
