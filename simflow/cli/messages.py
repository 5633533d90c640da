# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""User-facing messages and strings for CLI output.

Centralizes UI text to separate presentation from business logic.
"""

# ============================================================================
# Pipeline Messages
# ============================================================================

NOTHING_TO_DO = "Nothing to be done for '{operation}': '{output}' is up to date."
DRY_RUN_NOTICE = "Dry run: commands were printed, not executed."

# ============================================================================
# Configuration Messages
# ============================================================================

CONFIG_EDIT_HINT = "\nEdit the file to choose the testbench and tool settings."

# ============================================================================
# Error Detail Messages
# ============================================================================

DEBUG_HINT = "Run with --log-level debug for detailed traceback"
