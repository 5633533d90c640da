# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

from enum import IntEnum

# ============================================================================
# CLI Names
# ============================================================================

CLI_NAME = "simflow"

# Command run when none is given
DEFAULT_COMMAND = "compile"

# ============================================================================
# Environment Variables
# ============================================================================

ENV_LOG_LEVEL = "SIMFLOW_LOG_LEVEL"

# ============================================================================
# Exit Codes (BSD sysexits.h where one fits)
# ============================================================================


class ExitCode(IntEnum):
    SUCCESS = 0
    ERROR = 1
    USAGE = 64
    DATAERR = 65
    SOFTWARE = 70
    CONFIG = 78
    INTERRUPTED = 130  # Standard SIGINT exit code
