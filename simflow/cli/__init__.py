# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""simflow command-line interface.

Architecture:
- create_cli() factory in cli.py builds a lazily loaded click group
- Configuration managed through ApplicationContext (context.py)
- Commands auto-receive context via @click.pass_obj decorator

Entry point defined in setup.py.
"""

from .cli import create_cli, main

__all__ = [
    "create_cli",
    "main",
]
