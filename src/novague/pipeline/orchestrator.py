"""Stage orchestrator for the design pipeline.

This module implements the pipeline state machine:

    IDLE(0) -> ANALYZED(1) -> UX_DESIGNED(2) -> DATA_DESIGNED(3)
        -> COMPONENTS_DESIGNED(4) -> VALIDATED(5) -> VISUALIZED(6)

Forward moves run the stage contract for the target stage and require the
artifacts it consumes. Completed stages can be regenerated (bumping their
version and marking later records stale) or revisited with ``jump_to``,
which never clears records.

At most one generation is in flight per pipeline. Each generation captures
an epoch token; ``jump_to`` and ``reset`` bump the epoch, and a result that
arrives with an outdated token is discarded instead of being applied.
"""

from __future__ import annotations

import uuid
from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from pydantic import BaseModel

from novague.logging import pipeline_context
from novague.models.graph import ProjectionMode, VisualizationGraph
from novague.pipeline.assembly import assemble_project
from novague.pipeline.state import STAGE_LABELS, PipelineState, Stage
from novague.stages.contracts import (
    StageContext,
    analyze_idea,
    build_validator,
    design_components,
    design_data,
    design_ux,
    validate_integration,
)
from novague.visualization.projector import project_graph

logger = structlog.get_logger(__name__)


class PipelineError(Exception):
    """Base exception for malformed pipeline calls."""


class PreconditionError(PipelineError):
    """Raised when a stage is triggered without the artifacts it consumes.

    Attributes:
        stage: The stage that was requested
        missing: Stages (0 meaning the idea) whose artifacts are absent
    """

    def __init__(self, stage: Stage, missing: list[Stage]) -> None:
        self.stage = stage
        self.missing = missing
        names = ", ".join(STAGE_LABELS[m] for m in missing)
        super().__init__(f"Cannot run stage {int(stage)} ({STAGE_LABELS[stage]}): missing {names}")


class StageAlreadyCompletedError(PipelineError):
    """Raised when advancing to a stage that is already completed."""

    def __init__(self, stage: Stage) -> None:
        self.stage = stage
        super().__init__(
            f"Stage {int(stage)} ({STAGE_LABELS[stage]}) is already completed; use regenerate"
        )


class StageNotCompletedError(PipelineError):
    """Raised when jumping to a stage that was never completed."""

    def __init__(self, stage: Stage) -> None:
        self.stage = stage
        super().__init__(f"Stage {int(stage)} ({STAGE_LABELS[stage]}) has not been completed")


class PipelineBusyError(PipelineError):
    """Raised when a stage is triggered while another generation is in flight."""


class StaleGenerationError(PipelineError):
    """Raised when a generation result is discarded because the pipeline moved on."""

    def __init__(self, stage: Stage, token: int, epoch: int) -> None:
        self.stage = stage
        self.token = token
        self.epoch = epoch
        super().__init__(
            f"Result for stage {int(stage)} discarded (token {token}, current epoch {epoch})"
        )


# Stages whose artifacts each stage consumes; stage 1 consumes only the idea
PREREQUISITES: dict[Stage, tuple[Stage, ...]] = {
    Stage.ANALYZED: (),
    Stage.UX_DESIGNED: (Stage.ANALYZED,),
    Stage.DATA_DESIGNED: (Stage.ANALYZED, Stage.UX_DESIGNED),
    Stage.COMPONENTS_DESIGNED: (Stage.UX_DESIGNED, Stage.DATA_DESIGNED),
    Stage.VALIDATED: (
        Stage.ANALYZED,
        Stage.UX_DESIGNED,
        Stage.DATA_DESIGNED,
        Stage.COMPONENTS_DESIGNED,
    ),
    Stage.VISUALIZED: (
        Stage.ANALYZED,
        Stage.UX_DESIGNED,
        Stage.DATA_DESIGNED,
        Stage.COMPONENTS_DESIGNED,
        Stage.VALIDATED,
    ),
}

DESIGN_STAGES = (
    Stage.ANALYZED,
    Stage.UX_DESIGNED,
    Stage.DATA_DESIGNED,
    Stage.COMPONENTS_DESIGNED,
)


class DesignPipeline:
    """One design session: the artifact chain and the stage pointer.

    The pipeline is the sole writer of its state; projections and the
    validator only read it.

    Attributes:
        id: Pipeline identifier
        context: Stage context (config, backend, validator)
        state: Current pipeline state
    """

    def __init__(self, context: StageContext, pipeline_id: str | None = None) -> None:
        self.id = pipeline_id or uuid.uuid4().hex
        if context.validator is None:
            context.validator = build_validator(context.config.pipeline)
        self.context = context
        self.state = PipelineState()
        self._epoch = 0
        self._generating = False
        self._handlers: dict[Stage, Callable[[], Awaitable[BaseModel]]] = {
            Stage.ANALYZED: self._run_analysis,
            Stage.UX_DESIGNED: self._run_ux,
            Stage.DATA_DESIGNED: self._run_data,
            Stage.COMPONENTS_DESIGNED: self._run_components,
            Stage.VALIDATED: self._run_validation,
            Stage.VISUALIZED: self._run_assembly,
        }
        self.logger = logger.bind(component="DesignPipeline", pipeline_id=self.id)

    @property
    def is_generating(self) -> bool:
        """Whether a generation is in flight."""
        return self._generating

    @property
    def epoch(self) -> int:
        """Current generation epoch."""
        return self._epoch

    def submit_idea(self, idea: str) -> None:
        """Store the idea that stage 1 will analyze.

        Raises:
            ValueError: If the idea is blank
            PipelineError: If stage 1 has already been completed
        """
        if not idea.strip():
            raise ValueError("Idea must not be empty")
        if self.state.is_completed(Stage.ANALYZED):
            raise PipelineError("The idea cannot change once it has been analyzed")
        self.state.idea = idea.strip()
        self.logger.info("idea_submitted", idea_length=len(self.state.idea))

    async def advance(self, stage: int | Stage) -> BaseModel:
        """Run a stage that has not been completed yet.

        Args:
            stage: Stage number 1-6

        Returns:
            The stage artifact (the assembled Project for stage 6)

        Raises:
            StageAlreadyCompletedError: If the stage is already completed
            PreconditionError: If a consumed artifact is missing
            PipelineBusyError: If another generation is in flight
            StaleGenerationError: If the pipeline moved on before the result arrived
        """
        target = self._coerce(stage)
        if self.state.is_completed(target):
            raise StageAlreadyCompletedError(target)
        return await self._generate(target)

    async def regenerate(self, stage: int | Stage) -> BaseModel:
        """Run a stage again, overwriting its artifact in place.

        The record version is bumped and every later record is marked stale.
        Raises the same errors as ``advance`` except StageAlreadyCompletedError.
        """
        return await self._generate(self._coerce(stage))

    def jump_to(self, stage: int | Stage) -> None:
        """Move the pointer to a completed stage without clearing any record.

        Any in-flight generation is superseded and its result discarded.

        Raises:
            StageNotCompletedError: If the stage was never completed
        """
        target = Stage(stage)
        if not self.state.is_completed(target):
            raise StageNotCompletedError(target)
        self._epoch += 1
        previous = self.state.current
        self.state.current = target
        self.logger.info("stage_jump", from_stage=int(previous), to_stage=int(target))

    def reset(self) -> None:
        """Clear the idea and every record; supersede any in-flight generation."""
        self._epoch += 1
        self.state = PipelineState()
        self.logger.info("pipeline_reset")

    def graph(self, mode: ProjectionMode | str) -> VisualizationGraph:
        """Project the current design artifacts into a graph.

        Raises:
            PreconditionError: If any of stages 1-4 is missing
        """
        missing = [s for s in DESIGN_STAGES if not self.state.is_completed(s)]
        if missing:
            raise PreconditionError(Stage.VISUALIZED, missing)
        return project_graph(
            ProjectionMode(mode),
            self.state.analysis,  # type: ignore[arg-type]
            self.state.ux,  # type: ignore[arg-type]
            self.state.data,  # type: ignore[arg-type]
            self.state.components,  # type: ignore[arg-type]
        )

    def summary(self) -> dict[str, Any]:
        """Serializable overview of the pipeline."""
        return {
            "id": self.id,
            "idea": self.state.idea,
            "current_stage": int(self.state.current),
            "stages_completed": self.state.stages_completed,
            "is_generating": self._generating,
            "records": {
                str(number): {"version": record.version, "stale": record.stale}
                for number, record in sorted(self.state.records.items())
            },
        }

    def _coerce(self, stage: int | Stage) -> Stage:
        target = Stage(stage)
        if target == Stage.IDLE:
            raise ValueError("Stage 0 is the idea and cannot be generated")
        return target

    def _check_preconditions(self, stage: Stage) -> None:
        missing: list[Stage] = []
        if stage == Stage.ANALYZED and not self.state.idea:
            missing.append(Stage.IDLE)
        missing.extend(s for s in PREREQUISITES[stage] if not self.state.is_completed(s))
        if missing:
            raise PreconditionError(stage, missing)

    async def _generate(self, stage: Stage) -> BaseModel:
        # One generation at a time per pipeline
        if self._generating:
            raise PipelineBusyError(f"Stage generation already in progress for {self.id}")
        self._check_preconditions(stage)

        # Capture a token; reset/jump_to bump the epoch and invalidate it
        self._epoch += 1
        token = self._epoch
        self._generating = True
        with pipeline_context(self.id, int(stage)):
            self.logger.info("stage_started", stage=int(stage), token=token)
            try:
                artifact = await self._handlers[stage]()
            finally:
                self._generating = False

        # Superseded while in flight
        if token != self._epoch:
            self.logger.warning(
                "stage_result_discarded", stage=int(stage), token=token, epoch=self._epoch
            )
            raise StaleGenerationError(stage, token, self._epoch)

        # Store, bump the version and mark later records stale
        record = self.state.store(stage, artifact)
        self.state.current = stage
        self.logger.info("stage_completed", stage=int(stage), version=record.version)
        return artifact

    async def _run_analysis(self) -> BaseModel:
        return await analyze_idea(self.state.idea or "", self.context)

    async def _run_ux(self) -> BaseModel:
        return await design_ux(self.state.analysis, self.context)  # type: ignore[arg-type]

    async def _run_data(self) -> BaseModel:
        return await design_data(
            self.state.analysis, self.state.ux, self.context  # type: ignore[arg-type]
        )

    async def _run_components(self) -> BaseModel:
        return await design_components(
            self.state.ux, self.state.data, self.context  # type: ignore[arg-type]
        )

    async def _run_validation(self) -> BaseModel:
        return await validate_integration(
            self.state.analysis,  # type: ignore[arg-type]
            self.state.ux,  # type: ignore[arg-type]
            self.state.data,  # type: ignore[arg-type]
            self.state.components,  # type: ignore[arg-type]
            self.context,
        )

    async def _run_assembly(self) -> BaseModel:
        return assemble_project(
            self.state.analysis,  # type: ignore[arg-type]
            self.state.ux,  # type: ignore[arg-type]
            self.state.data,  # type: ignore[arg-type]
            self.state.components,  # type: ignore[arg-type]
        )
