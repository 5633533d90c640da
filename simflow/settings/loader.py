# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Configuration loading for simflow."""

import os
from pathlib import Path
from typing import Any, Dict, Optional
from unittest.mock import patch

from pydantic import ValidationError
from rich.console import Console

from .schema import SimflowConfig

console = Console(stderr=True)

ENV_PREFIX = "SIMFLOW_"


def _is_path_field(key: str) -> bool:
    """Fields named *_dir, *_path or *_file hold paths."""
    return key.endswith(("_dir", "_path", "_file"))


def _absolute(value: Any) -> Any:
    if not isinstance(value, (str, Path)):
        return value
    path = Path(value)
    if path.is_absolute():
        return str(path)
    return str((Path.cwd() / path).resolve())


def _resolve_cli_paths(cli_overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Anchor relative path options at the directory simflow was run from."""
    return {
        key: _absolute(value) if _is_path_field(key) else value
        for key, value in cli_overrides.items()
    }


def _report_validation_errors(error: ValidationError) -> None:
    console.print(f"[bold red]Invalid configuration ({error.error_count()} problem(s)):[/bold red]")
    for problem in error.errors():
        location = ".".join(str(part) for part in problem["loc"]) or "<root>"
        console.print(f"  [red]{location}[/red]: {problem['msg']}")


def load_config(
    override_file: Optional[Path] = None,
    **cli_overrides
) -> SimflowConfig:
    """Load configuration with hierarchical priority.

    Priority order (highest to lowest):
    1. CLI arguments (passed as kwargs; None values are ignored)
    2. Environment variables (SIMFLOW_* prefix)
    3. Override file (simflow.mk)
    4. Built-in defaults

    SIMFLOW_LOG_LEVEL is accepted as shorthand for SIMFLOW_LOGGING__LEVEL.

    Args:
        override_file: Explicit override file (skips auto-detection)
        **cli_overrides: CLI argument overrides

    Returns:
        SimflowConfig object
    """
    explicit = {key: value for key, value in cli_overrides.items() if value is not None}
    if override_file is not None:
        explicit["override_file"] = override_file

    shorthand = os.environ.get(f"{ENV_PREFIX}LOG_LEVEL")
    if shorthand is not None:
        explicit.setdefault("logging", {"level": shorthand})

    try:
        return SimflowConfig(**_resolve_cli_paths(explicit))
    except ValidationError as e:
        _report_validation_errors(e)
        raise


def get_default_config() -> SimflowConfig:
    """Built-in defaults only: no override file and no SIMFLOW_* variables."""
    host_env = {key: value for key, value in os.environ.items() if not key.startswith(ENV_PREFIX)}

    with patch.dict(os.environ, host_env, clear=True):
        return load_config(override_file=Path(os.devnull), project_dir=Path.cwd())
