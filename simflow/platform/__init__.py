# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Platform layer: one profile per run, selected at startup."""

import logging
import os

from .base import Invocation, PlatformProfile, Stream, ToolSettings
from .dispatcher import CommandDispatcher
from .posix import PosixProfile
from .windows import WindowsProfile

logger = logging.getLogger(__name__)

PROFILES = {
    PosixProfile.name: PosixProfile,
    WindowsProfile.name: WindowsProfile,
}


def detect_platform() -> str:
    return WindowsProfile.name if os.name == "nt" else PosixProfile.name


def select_profile(name: str = "auto", tools: ToolSettings | None = None) -> PlatformProfile:
    """Instantiate the profile for ``name`` ('auto', 'posix' or 'windows')."""
    if name == "auto":
        name = detect_platform()
    try:
        profile_cls = PROFILES[name]
    except KeyError:
        raise ValueError(
            f"Unknown platform '{name}'. Choose from: auto, {', '.join(sorted(PROFILES))}"
        ) from None
    logger.debug("Selected platform profile: %s", name)
    return profile_cls(tools)


__all__ = [
    "CommandDispatcher",
    "Invocation",
    "PlatformProfile",
    "PosixProfile",
    "Stream",
    "ToolSettings",
    "WindowsProfile",
    "detect_platform",
    "select_profile",
]
