"""Pipeline state machine, stage records and project assembly."""

from __future__ import annotations

from novague.pipeline.assembly import assemble_project
from novague.pipeline.orchestrator import (
    PREREQUISITES,
    DesignPipeline,
    PipelineBusyError,
    PipelineError,
    PreconditionError,
    StageAlreadyCompletedError,
    StageNotCompletedError,
    StaleGenerationError,
)
from novague.pipeline.registry import PipelineNotFoundError, PipelineRegistry
from novague.pipeline.state import STAGE_LABELS, PipelineState, Stage, StageRecord

__all__ = [
    "PREREQUISITES",
    "STAGE_LABELS",
    "DesignPipeline",
    "PipelineBusyError",
    "PipelineError",
    "PipelineNotFoundError",
    "PipelineRegistry",
    "PipelineState",
    "PreconditionError",
    "Stage",
    "StageAlreadyCompletedError",
    "StageNotCompletedError",
    "StageRecord",
    "StaleGenerationError",
    "assemble_project",
]
