# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

import shlex
from typing import Any

from .base import PlatformProfile


class PosixProfile(PlatformProfile):
    """Linux and macOS: commands are plain argv lists."""

    name = "posix"

    def detach_options(self) -> dict[str, Any]:
        # New session: the viewer keeps running after the terminal closes
        return {"start_new_session": True, "close_fds": True}

    def format_command(self, argv: tuple[str, ...]) -> str:
        return shlex.join(argv)
