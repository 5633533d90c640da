# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""simflow configuration schema using Pydantic.

Configuration Priority
----------------------
Settings are loaded from multiple sources with the following priority
(highest to lowest):
1. CLI arguments (passed to SimflowConfig constructor)
2. Environment variables (SIMFLOW_* prefix)
3. Override file (simflow.mk)
4. Built-in defaults

Path Resolution Rules
---------------------
"Paths resolve relative to where they're specified":

1. Absolute paths are used as-is
2. Relative paths from the CLI resolve to the current working directory
   (done in load_config() before SimflowConfig is created)
3. Relative paths from the override file, environment or defaults resolve to
   the project directory

The project directory is SIMFLOW_PROJECT_DIR if set, otherwise the directory
holding the override file, otherwise the current working directory.
"""

from __future__ import annotations

import os
import shlex
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import (
    BaseSettings,
    NoDecode,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from simflow._internal.logging import LEVELS

from .override_file import OverrideFileSettingsSource, find_override_file


class LoggingConfig(BaseModel):
    """Console verbosity."""

    level: str = Field(
        default="normal", description="Console verbosity level: quiet | normal | verbose | debug"
    )

    model_config = ConfigDict(extra="forbid")

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        value = value.lower()
        if value not in LEVELS:
            raise ValueError(f"unknown log level '{value}' (expected one of: {', '.join(LEVELS)})")
        return value


class SimflowConfig(BaseSettings):
    """Configuration schema with hierarchical priority.

    Priority order (highest to lowest):
    1. CLI arguments (passed to constructor)
    2. Environment variables (SIMFLOW_* prefix)
    3. Override file (simflow.mk)
    4. Built-in defaults
    """

    testbench: str | None = Field(
        default=None,
        description="Unit under test, relative to source_dir and without extension",
    )

    project_dir: Path | None = Field(
        default=None, description="Project root (auto-detected when unset)"
    )
    override_file: Path | None = Field(
        default=None, description="Key/value override file (auto-detected when unset)"
    )
    source_dir: Path = Field(default=Path("source"), description="Root of the HDL source tree")
    build_dir: Path = Field(default=Path("build"), description="Build output directory")

    source_ext: str = Field(default=".v", description="Source file extension")
    image_ext: str = Field(default=".vvp", description="Compiled image extension")
    dump_ext: str = Field(default=".vcd", description="Waveform dump extension")
    log_ext: str = Field(default=".log", description="Simulation log extension")

    dump_macro: str = Field(
        default="DUMP_FILE",
        description="Preprocessor macro bound to the dump file path at compile time",
    )

    platform: Literal["auto", "posix", "windows"] = Field(
        default="auto", description="Command profile (auto-detected from the OS)"
    )
    compiler: str = Field(default="iverilog", description="HDL compiler executable")
    simulator: str = Field(default="vvp", description="Simulator executable")
    viewer: str = Field(default="gtkwave", description="Waveform viewer executable")
    # NoDecode: env and file values are shell-split rather than parsed as JSON
    compiler_flags: Annotated[list[str], NoDecode] = Field(
        default_factory=list, description="Extra arguments passed to the compiler"
    )

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )

    model_config = SettingsConfigDict(
        env_prefix="SIMFLOW_",
        env_nested_delimiter="__",
        validate_assignment=True,
        extra="ignore",
        case_sensitive=False,
        env_file=None,  # The override file is handled by a custom source
    )

    @field_validator("compiler_flags", mode="before")
    @classmethod
    def _split_flags(cls, value: Any) -> Any:
        if isinstance(value, str):
            return shlex.split(value)
        return value

    @field_validator("source_ext", "image_ext", "dump_ext", "log_ext")
    @classmethod
    def _dotted(cls, value: str) -> str:
        return value if value.startswith(".") else f".{value}"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources.

        Priority order (first source wins):
        1. Init settings (CLI/constructor args)
        2. Environment variables (SIMFLOW_*)
        3. Override file (custom source)
        4. Field defaults
        """
        override_file = init_settings().get("override_file")
        if override_file is None and os.environ.get("SIMFLOW_OVERRIDE_FILE"):
            override_file = os.environ["SIMFLOW_OVERRIDE_FILE"]

        return (
            init_settings,
            env_settings,
            OverrideFileSettingsSource(
                settings_cls,
                override_file=Path(override_file) if override_file else None,
            ),
        )

    def model_post_init(self, __context: Any) -> None:
        """Record the discovered override file and resolve all paths to absolute."""
        explicit = set(self.model_fields_set)
        if self.override_file is None:
            self.override_file = find_override_file()
        self.project_dir = self._detect_project_dir()
        self.source_dir = self._resolve(self.source_dir)
        self.build_dir = self._resolve(self.build_dir)
        if self.override_file is not None:
            self.override_file = self._resolve(self.override_file)
        # Resolution does not count as explicit configuration
        self.__pydantic_fields_set__ = explicit

    def _detect_project_dir(self) -> Path:
        if self.project_dir is not None:
            return self.project_dir.expanduser().resolve()
        if self.override_file is not None and self.override_file.is_absolute():
            return self.override_file.parent
        return Path.cwd().resolve()

    def _resolve(self, path: Path) -> Path:
        path = path.expanduser()
        if path.is_absolute():
            return path
        return (self.project_dir / path).resolve()
