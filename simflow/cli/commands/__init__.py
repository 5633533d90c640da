# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""simflow CLI commands.

This module provides the single source of truth for all CLI command registration.
Command mappings are used by cli.py's LazyGroup for lazy loading.
"""

# Format: 'command_name': (relative_module, attribute_name)
_COMMAND_REGISTRY = {
    "compile": (".build", "compile_"),
    "sim": (".build", "sim"),
    "simi": (".build", "simi"),
    "wave": (".build", "wave"),
    "clean": (".build", "clean"),
    "config": (".config", "config"),
}


def _build_command_map() -> dict[str, tuple[str, str]]:
    """Convert relative imports to absolute for LazyGroup."""
    return {
        name: (f"simflow.cli.commands{module}", attr)
        for name, (module, attr) in _COMMAND_REGISTRY.items()
    }


COMMAND_MAP = _build_command_map()

__all__ = [
    "COMMAND_MAP",
]
