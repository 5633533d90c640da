# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from simflow.core.exceptions import ConfigurationError

from .utils import console

# Type hints only - settings and pipeline imported lazily inside methods
if TYPE_CHECKING:
    from simflow.core.pipeline import Pipeline
    from simflow.settings import SimflowConfig

logger = logging.getLogger(__name__)


@dataclass
class ApplicationContext:
    """CLI execution context with SimflowConfig loading and CLI argument handling."""

    dry_run: bool = False
    config_file: Path | None = None
    overrides: dict[str, Any] = field(default_factory=dict)

    # Loaded configuration
    config: SimflowConfig | None = None

    @classmethod
    def from_cli_args(
        cls,
        config_file: Path | None,
        testbench: str | None,
        build_dir_override: Path | None,
        platform: str | None,
        log_level: str | None,
        dry_run: bool,
    ) -> ApplicationContext:
        """Create context from CLI arguments, load configuration and set up logging."""
        from simflow._internal.logging import setup_logging

        given = {
            "testbench": testbench,
            "build_dir": str(build_dir_override) if build_dir_override else None,
            "platform": platform,
            "logging": {"level": log_level} if log_level else None,
        }
        context = cls(
            config_file=config_file,
            dry_run=dry_run,
            overrides={key: value for key, value in given.items() if value},
        )

        context.load_configuration()
        setup_logging(level=context.config.logging.level)
        logger.debug(
            "CLI initialized with log level=%s, dry_run=%s",
            context.config.logging.level, dry_run
        )

        return context

    def load_configuration(self) -> None:
        from pydantic import ValidationError

        from simflow.settings import load_config

        try:
            self.config = load_config(override_file=self.config_file, **self.overrides)
        except ValidationError as e:
            # Field-level messages were already printed by load_config
            raise ConfigurationError(f"Invalid configuration ({e.error_count()} error(s))") from e

    def get_effective_config(self) -> SimflowConfig:
        if not self.config:
            self.load_configuration()
        return self.config

    def get_pipeline(self) -> Pipeline:
        """Resolve the unit under test, then wire the pipeline for it."""
        from simflow.core.pipeline import build_pipeline
        from simflow.settings import resolve_unit

        config = self.get_effective_config()
        unit = resolve_unit(config)
        return build_pipeline(config, unit, console=console, dry_run=self.dry_run)
