# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Validation of the unit under test and of config file creation.

The unit under test is checked before any target is resolved or any tool
runs; both failures are configuration errors.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from simflow.core.exceptions import ConfigurationError
from simflow.core.targets import UnitUnderTest

from .override_file import OVERRIDE_FILE_NAME

if TYPE_CHECKING:
    from .schema import SimflowConfig

logger = logging.getLogger(__name__)


def _remediation() -> list[str]:
    return [
        "Specify it on the command line:",
        "    simflow --testbench path/to/testbench",
        f"Or place the following in a file named '{OVERRIDE_FILE_NAME}':",
        "    TESTBENCH ?= path/to/testbench",
    ]


def resolve_unit(config: SimflowConfig) -> UnitUnderTest:
    """Resolve and check the unit under test.

    Raises:
        ConfigurationError: If no testbench is configured, the identifier is
            malformed, or its source file does not exist
    """
    if not config.testbench:
        raise ConfigurationError("Testbench not specified.", details=_remediation())

    try:
        unit = UnitUnderTest.parse(config.testbench, config.source_ext)
    except ValueError as e:
        raise ConfigurationError(
            str(e),
            details=["The testbench is a path relative to the source directory, without extension"],
        ) from e

    source = config.source_dir / f"{unit.name}{config.source_ext}"
    if not source.is_file():
        raise ConfigurationError(
            f"Testbench '{source}' not found",
            details=[
                f"Source directory: {config.source_dir}",
                *_remediation(),
            ],
        )

    logger.debug("Unit under test: %s (%s)", unit, source)
    return unit


def validate_config_file_creation(path: Path, force: bool) -> None:
    """Refuse to overwrite an existing override file unless forced.

    Raises:
        ConfigurationError: If file exists and force=False
    """
    if path.exists() and not force:
        raise ConfigurationError(
            f"{path} already exists. Use --force to overwrite.",
            details=["Run with --force flag to overwrite existing configuration"],
        )
