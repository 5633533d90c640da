# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""simflow configuration module.

Provides type-safe configuration management with Pydantic Settings.
"""

from .loader import get_default_config, load_config
from .override_file import OVERRIDE_FILE_NAME, find_override_file, parse_override_file
from .schema import LoggingConfig, SimflowConfig
from .validation import resolve_unit, validate_config_file_creation

__all__ = [
    "OVERRIDE_FILE_NAME",
    "LoggingConfig",
    "SimflowConfig",
    "find_override_file",
    "get_default_config",
    "load_config",
    "parse_override_file",
    "resolve_unit",
    "validate_config_file_creation",
]
