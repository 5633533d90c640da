# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Key/value override file.

The override file is a small make-style file that pins settings for a
project, most commonly the testbench to build:

    # simflow.mk
    TESTBENCH ?= counter/counter_tb
    BUILD_DIR := out

Recognized operators are ``?=`` (set unless already set earlier in the
file), ``:=`` and ``=`` (always set). Keys are case-insensitive and map onto
SimflowConfig fields. Values may be quoted; ``$VAR`` and ``${VAR}`` are
expanded from the environment.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any

from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from simflow.core.exceptions import OverrideFileError

logger = logging.getLogger(__name__)

OVERRIDE_FILE_NAME = "simflow.mk"
PROJECT_DIR_ENV = "SIMFLOW_PROJECT_DIR"

_ASSIGNMENT = re.compile(r"^(?P<key>[A-Za-z_][A-Za-z0-9_]*)\s*(?P<op>\?=|:=|=)\s*(?P<value>.*)$")
_TRAILING_COMMENT = re.compile(r"\s+#.*$")

# Keys that live in a nested model rather than at the top level
_NESTED_KEYS = {"log_level": ("logging", "level")}


def find_override_file() -> Path | None:
    """Locate the override file.

    Search order:
    1. If SIMFLOW_PROJECT_DIR is set, check that directory only
    2. Otherwise walk up from CWD to the filesystem root
    """
    if project_dir := os.environ.get(PROJECT_DIR_ENV):
        candidate = Path(project_dir).resolve() / OVERRIDE_FILE_NAME
        return candidate if candidate.is_file() else None

    current = Path.cwd().resolve()
    while True:
        candidate = current / OVERRIDE_FILE_NAME
        if candidate.is_file():
            return candidate
        if current == current.parent:
            return None
        current = current.parent


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return _TRAILING_COMMENT.sub("", value)


def parse_override_file(path: Path) -> dict[str, str]:
    """Parse an override file into lower-cased keys and string values.

    Raises:
        OverrideFileError: On a line that is not blank, a comment, or an
            assignment
    """
    values: dict[str, str] = {}

    with open(path, encoding="utf-8") as f:
        for lineno, raw in enumerate(f, start=1):
            line = raw.strip()
            if not line or line.startswith("#"):
                continue

            match = _ASSIGNMENT.match(line)
            if match is None:
                raise OverrideFileError(
                    f"Invalid line in override file {path}",
                    details=[
                        f"line {lineno}: {line}",
                        "Expected an assignment such as: TESTBENCH ?= path/to/testbench",
                    ],
                )

            key = match["key"].lower()
            if match["op"] == "?=" and key in values:
                continue
            values[key] = os.path.expandvars(_unquote(match["value"].strip()))

    return values


class OverrideFileSettingsSource(PydanticBaseSettingsSource):
    """Settings source backed by the key/value override file."""

    def __init__(self, settings_cls: type[BaseSettings], override_file: Path | None = None):
        super().__init__(settings_cls)
        self.file_used: Path | None = None

        if override_file is not None:
            if override_file.is_file():
                self.file_used = override_file
            else:
                logger.debug("Override file %s does not exist, skipping", override_file)
        else:
            self.file_used = find_override_file()

        self._data = self._load() if self.file_used else {}

    def _load(self) -> dict[str, Any]:
        logger.debug("Loading overrides from %s", self.file_used)
        data: dict[str, Any] = {}
        fields = self.settings_cls.model_fields

        for key, value in parse_override_file(self.file_used).items():
            if key in _NESTED_KEYS:
                section, name = _NESTED_KEYS[key]
                data.setdefault(section, {})[name] = value
            elif key in fields:
                data[key] = value
            else:
                logger.warning("Ignoring unknown key '%s' in %s", key.upper(), self.file_used)

        return data

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        if field_name in self._data:
            return self._data[field_name], field_name, True
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        return self._data.copy()
