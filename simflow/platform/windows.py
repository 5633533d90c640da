# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

import subprocess
from typing import Any

from .base import PlatformProfile

# Defined only on Windows builds of the subprocess module
DETACHED_PROCESS = getattr(subprocess, "DETACHED_PROCESS", 0x00000008)
CREATE_NEW_PROCESS_GROUP = getattr(subprocess, "CREATE_NEW_PROCESS_GROUP", 0x00000200)


class WindowsProfile(PlatformProfile):
    """Windows: executables resolved through PATHEXT, quoting per MSVCRT rules."""

    name = "windows"

    def detach_options(self) -> dict[str, Any]:
        return {
            "creationflags": DETACHED_PROCESS | CREATE_NEW_PROCESS_GROUP,
            "close_fds": True,
        }

    def format_command(self, argv: tuple[str, ...]) -> str:
        return subprocess.list2cmdline(argv)
