# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

from __future__ import annotations  # PEP 563: Postponed evaluation of annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

from rich.console import Console as RichConsole
from rich.panel import Panel
from rich.table import Table

from .constants import ENV_LOG_LEVEL

# Lazy import settings
if TYPE_CHECKING:
    from simflow.settings import SimflowConfig

# Source constants for configuration display
_SOURCE_CLI = "cli"
_SOURCE_ENV = "env"
_SOURCE_FILE = "file"
_SOURCE_DEFAULT = "default"

_ENV_PREFIX = "SIMFLOW_"


class ConfigFormatter:
    """Formatter for displaying simflow configuration."""

    def __init__(self, console: RichConsole | None = None, cli_keys: Iterable[str] = ()):
        self.console = console or RichConsole()
        self.cli_keys = set(cli_keys)

    def format_metadata(self, config: SimflowConfig) -> Panel:
        """Format project directory, override file and platform as a Rich panel."""
        from simflow.platform import detect_platform

        lines = [f"[cyan]Project directory:[/cyan] {config.project_dir}"]

        if config.override_file:
            lines.append(f"[cyan]Override file:[/cyan]     {self._format_path(config.override_file)}")
        else:
            lines.append("[cyan]Override file:[/cyan]     [dim]none[/dim]")

        platform = config.platform
        if platform == "auto":
            platform = f"{detect_platform()} [dim](auto)[/dim]"
        lines.append(f"[cyan]Platform:[/cyan]          {platform}")

        return Panel("\n".join(lines), title="Configuration Metadata", border_style="cyan")

    def format_table(self, config: SimflowConfig) -> Table:
        """Format configuration as Rich table with source information."""
        table = Table(title="simflow Configuration")
        table.add_column("Setting", style="cyan")
        table.add_column("Value")
        table.add_column("Source", style="yellow")

        table.add_row("Unit Under Test", "", "")
        table.add_row("  Testbench",
                      config.testbench or "[yellow]not set[/yellow]",
                      self._get_source("testbench", config))

        table.add_row("", "", "")
        table.add_row("Layout", "", "")
        table.add_row("  Source Directory", self._format_path(config.source_dir),
                      self._get_source("source_dir", config))
        table.add_row("  Build Directory", self._format_path(config.build_dir),
                      self._get_source("build_dir", config))
        for label, name in [
            ("  Source Extension", "source_ext"),
            ("  Image Extension", "image_ext"),
            ("  Dump Extension", "dump_ext"),
            ("  Log Extension", "log_ext"),
        ]:
            table.add_row(label, getattr(config, name), self._get_source(name, config))

        table.add_row("", "", "")
        table.add_row("Tools", "", "")
        for label, name in [
            ("  Compiler", "compiler"),
            ("  Simulator", "simulator"),
            ("  Viewer", "viewer"),
        ]:
            table.add_row(label, self._format_tool(getattr(config, name)),
                          self._get_source(name, config))
        table.add_row("  Compiler Flags",
                      " ".join(config.compiler_flags) or "[dim]none[/dim]",
                      self._get_source("compiler_flags", config))
        table.add_row("  Dump Macro", config.dump_macro,
                      self._get_source("dump_macro", config))
        table.add_row("  Platform", config.platform,
                      self._get_source("platform", config))

        table.add_row("", "", "")
        table.add_row("Logging", "", "")
        table.add_row("  Level", config.logging.level,
                      self._get_source("logging", config, env_var=ENV_LOG_LEVEL))

        return table

    def _format_path(self, path: Path | None) -> str:
        if not path:
            return "[dim]not set[/dim]"

        color = "green" if path.exists() else "yellow"
        return f"[{color}]{path}[/{color}]"

    def _format_tool(self, program: str) -> str:
        """Color a tool by whether it can be found on PATH."""
        import shutil

        if shutil.which(program):
            return f"[green]{program}[/green]"
        return f"[yellow]{program}[/yellow] [dim](not found)[/dim]"

    def _get_source(self, setting_name: str, config: SimflowConfig, env_var: str | None = None) -> str:
        """Get simplified source string for a configuration setting.

        Uses Pydantic's model_fields_set to detect if a field was explicitly
        configured, combined with CLI and environment checks to tell those
        apart from the override file.

        Returns:
            Source string: "cli", "env", "file" or "default"
        """
        if setting_name in self.cli_keys:
            return _SOURCE_CLI

        env_names = [f"{_ENV_PREFIX}{setting_name.upper()}"]
        if env_var:
            env_names.append(env_var)
        if any(os.environ.get(name) for name in env_names):
            return _SOURCE_ENV
        if any(key.startswith(f"{env_names[0]}__") for key in os.environ):
            return _SOURCE_ENV

        if setting_name in config.model_fields_set:
            return _SOURCE_FILE

        return _SOURCE_DEFAULT
