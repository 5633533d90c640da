# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

import importlib
import logging
import sys
from pathlib import Path

import click

from .constants import CLI_NAME, DEFAULT_COMMAND, ExitCode
from .context import ApplicationContext
from .messages import DEBUG_HINT
from .utils import console

logger = logging.getLogger(__name__)

_HELP = """simflow - Compile, simulate and view Icarus Verilog testbenches.

Each step only runs when its inputs changed since the last run.

\b
COMMANDS:
  compile   Compile the testbench (default)
  sim       Simulate, writing the waveform dump and log
  simi      Simulate interactively in this terminal
  wave      Open the waveform dump in GTKWave
  clean     Remove the build directory"""


def _show_version(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    if not value or ctx.resilient_parsing:
        return
    from simflow import __version__
    console.print(f"[bold]{CLI_NAME}[/bold], version {__version__}")
    ctx.exit()


class LazyGroup(click.Group):
    """Group whose subcommands are imported on first use.

    Args:
        lazy_commands: Command name -> (module path, attribute name)
    """

    def __init__(self, *args, lazy_commands: dict[str, tuple[str, str]] | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self._lazy = dict(lazy_commands or {})

    def list_commands(self, ctx):
        return sorted({*self._lazy, *super().list_commands(ctx)})

    def get_command(self, ctx, name):
        target = self._lazy.get(name)
        if target is None:
            return super().get_command(ctx, name)
        module_path, attr_name = target
        return getattr(importlib.import_module(module_path), attr_name)


def _global_options() -> list[click.Option]:
    return [
        click.Option(
            ["-t", "--testbench"], metavar="PATH",
            help="Testbench to use, relative to the source directory, without extension",
        ),
        click.Option(
            ["-b", "--build-dir"], type=click.Path(path_type=Path),
            help="Build directory (default: build)",
        ),
        click.Option(
            ["-c", "--config"], type=click.Path(exists=True, dir_okay=False, path_type=Path),
            help="Override file to read instead of the nearest simflow.mk",
        ),
        click.Option(
            ["-p", "--platform"], type=click.Choice(["auto", "posix", "windows"]),
            help="Command profile (default: detected from the OS)",
        ),
        click.Option(
            ["-l", "--log-level"], type=click.Choice(["quiet", "normal", "verbose", "debug"]),
            metavar="LEVEL", help="Console verbosity: quiet | normal | verbose | debug",
        ),
        click.Option(
            ["-n", "--dry-run"], is_flag=True,
            help="Print the commands that would run without running them",
        ),
        click.Option(
            ["--version"], is_flag=True, expose_value=False, is_eager=True,
            callback=_show_version, help="Show the version and exit.",
        ),
    ]


def create_cli() -> click.Group:
    from simflow.cli.commands import COMMAND_MAP

    @click.pass_context
    def callback(
        ctx: click.Context,
        testbench: str | None,
        build_dir: Path | None,
        config: Path | None,
        platform: str | None,
        log_level: str | None,
        dry_run: bool,
    ) -> None:
        # An injected context (tests) is used as is
        if ctx.obj is None:
            ctx.obj = ApplicationContext.from_cli_args(
                config_file=config,
                testbench=testbench,
                build_dir_override=build_dir,
                platform=platform,
                log_level=log_level,
                dry_run=dry_run,
            )

        if ctx.invoked_subcommand is None:
            ctx.invoke(ctx.command.get_command(ctx, DEFAULT_COMMAND))

    return LazyGroup(
        name=CLI_NAME,
        help=_HELP,
        callback=callback,
        params=_global_options(),
        invoke_without_command=True,
        lazy_commands=COMMAND_MAP,
        context_settings={"help_option_names": ["-h", "--help"]},
    )


def main() -> None:
    """Console entry point: map every failure onto an exit code."""
    from simflow.core.exceptions import SimflowError

    try:
        create_cli()(standalone_mode=False)
    except (KeyboardInterrupt, click.exceptions.Abort):
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(ExitCode.INTERRUPTED)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except SimflowError as e:
        logger.debug("Command failed", exc_info=True)
        console.print(e.format_for_console())
        sys.exit(e.exit_code)
    except Exception as e:
        logger.exception("Unexpected error in %s", CLI_NAME)
        console.print(f"[red]Unexpected error:[/red] {e}")
        console.print(f"[dim]{DEBUG_HINT}[/dim]")
        sys.exit(ExitCode.SOFTWARE)


if __name__ == "__main__":
    main()
