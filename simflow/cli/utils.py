# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Console helpers shared by the CLI commands."""

from rich.console import Console

# Bound to sys.stdout at print time so CliRunner captures it
console = Console()


def _say(tag: str, message: str, *, blank_line: bool = False) -> None:
    lead = "\n" if blank_line else ""
    console.print(f"{lead}{tag} {message}")


def success(message: str) -> None:
    _say("[green]✓[/green]", message)


def warning(message: str, details: list[str] | None = None) -> None:
    """Warn, followed by one indented bullet per detail."""
    _say("[yellow]Warning:[/yellow]", message)
    for detail in details or ():
        console.print(f"  • {detail}", highlight=False)


def tip(message: str) -> None:
    _say("[yellow]Tip:[/yellow]", message, blank_line=True)
