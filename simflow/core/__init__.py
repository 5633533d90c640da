# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Target graph, staleness resolution, validation and the pipeline itself."""

from .exceptions import (
    BuildError,
    ConfigurationError,
    MissingArtifactError,
    OverrideFileError,
    SimflowError,
    SimulationError,
    ToolError,
    ToolNotFoundError,
)
from .pipeline import Pipeline, PipelineResult, build_pipeline
from .staleness import StalenessResolver
from .targets import (
    Action,
    ActionKind,
    BuildLayout,
    Target,
    TargetGraph,
    TargetKind,
    UnitUnderTest,
)
from .validator import CheckResult, DumpValidator

__all__ = [
    "Action",
    "ActionKind",
    "BuildError",
    "BuildLayout",
    "CheckResult",
    "ConfigurationError",
    "DumpValidator",
    "MissingArtifactError",
    "OverrideFileError",
    "Pipeline",
    "PipelineResult",
    "SimflowError",
    "SimulationError",
    "StalenessResolver",
    "Target",
    "TargetGraph",
    "TargetKind",
    "ToolError",
    "ToolNotFoundError",
    "UnitUnderTest",
    "build_pipeline",
]
