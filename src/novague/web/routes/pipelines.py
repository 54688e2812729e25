"""Pipeline session endpoints.

Clients create a pipeline from an idea, then drive it stage by stage:

    POST /pipelines/                                  create from an idea
    GET  /pipelines/{id}                              summary
    DELETE /pipelines/{id}                            drop the session
    POST /pipelines/{id}/stages/{stage}/advance       run a new stage
    POST /pipelines/{id}/stages/{stage}/regenerate    rerun a stage
    POST /pipelines/{id}/jump/{stage}                 move the pointer back
    GET  /pipelines/{id}/artifacts/{stage}            stored artifact
    GET  /pipelines/{id}/graph/{mode}                 graph projection
    GET  /pipelines/{id}/project                      assembled project

Malformed state calls (missing prerequisite, stage already completed,
generation in flight, superseded result) return 409.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from fastapi import Path as PathParam
from fastapi import status as http_status
from pydantic import BaseModel, Field

from novague.logging import get_logger
from novague.models.graph import ProjectionMode
from novague.pipeline.orchestrator import DesignPipeline, PipelineError
from novague.pipeline.registry import PipelineNotFoundError, PipelineRegistry
from novague.pipeline.state import STAGE_LABELS, Stage
from novague.web.dependencies import get_registry

logger = get_logger(__name__)


class PipelineCreate(BaseModel):
    """Request schema for creating a pipeline.

    Attributes:
        idea: Free-text product idea
    """

    idea: str = Field(..., min_length=1, max_length=5000)


class RecordSummary(BaseModel):
    """Version and staleness of one stage record."""

    version: int
    stale: bool


class PipelineSummary(BaseModel):
    """Response schema for pipeline state.

    Attributes:
        id: Pipeline identifier
        idea: Submitted idea
        current_stage: Stage pointer (0-6)
        stages_completed: Completion flags for stages 0-6
        is_generating: Whether a generation is in flight
        records: Record versions and stale flags keyed by stage number
    """

    id: str
    idea: str | None
    current_stage: int
    stages_completed: list[bool]
    is_generating: bool
    records: dict[str, RecordSummary]


def _to_http_error(pipeline_id: str, exc: PipelineError) -> HTTPException:
    logger.warning(
        "pipeline_request_rejected",
        pipeline_id=pipeline_id,
        error=str(exc),
        error_type=type(exc).__name__,
    )
    return HTTPException(status_code=http_status.HTTP_409_CONFLICT, detail=str(exc))


def _get_pipeline(registry: PipelineRegistry, pipeline_id: str) -> DesignPipeline:
    try:
        return registry.get(pipeline_id)
    except PipelineNotFoundError:
        logger.warning("pipeline_not_found", pipeline_id=pipeline_id)
        raise HTTPException(
            status_code=http_status.HTTP_404_NOT_FOUND,
            detail=f"Pipeline {pipeline_id} not found",
        ) from None


def create_pipelines_router() -> APIRouter:
    """Create the pipelines router.

    Returns:
        Configured APIRouter with pipeline endpoints.
    """
    router = APIRouter(prefix="/pipelines", tags=["pipelines"])

    @router.post(
        "/",
        response_model=PipelineSummary,
        status_code=http_status.HTTP_201_CREATED,
    )
    async def create_pipeline(
        body: PipelineCreate,
        registry: PipelineRegistry = Depends(get_registry),  # noqa: B008
    ) -> dict[str, Any]:
        """Create a pipeline and submit its idea.

        Raises:
            HTTPException: 422 if the idea is blank
        """
        try:
            pipeline = registry.create(body.idea)
        except ValueError as exc:
            raise HTTPException(
                status_code=http_status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=str(exc),
            ) from None
        return pipeline.summary()

    @router.get("/{pipeline_id}", response_model=PipelineSummary)
    async def get_pipeline(
        pipeline_id: str,
        registry: PipelineRegistry = Depends(get_registry),  # noqa: B008
    ) -> dict[str, Any]:
        """Get the pipeline summary.

        Raises:
            HTTPException: 404 if the pipeline is unknown
        """
        return _get_pipeline(registry, pipeline_id).summary()

    @router.post("/{pipeline_id}/stages/{stage}/advance")
    async def advance_stage(
        pipeline_id: str,
        stage: int = PathParam(..., ge=1, le=6),
        registry: PipelineRegistry = Depends(get_registry),  # noqa: B008
    ) -> dict[str, Any]:
        """Run a stage that has not been completed yet.

        Returns:
            The stage artifact as JSON.

        Raises:
            HTTPException: 404 if the pipeline is unknown, 409 on a state error
        """
        pipeline = _get_pipeline(registry, pipeline_id)
        try:
            artifact = await pipeline.advance(stage)
        except PipelineError as exc:
            raise _to_http_error(pipeline_id, exc) from None
        return artifact.model_dump(mode="json")

    @router.post("/{pipeline_id}/stages/{stage}/regenerate")
    async def regenerate_stage(
        pipeline_id: str,
        stage: int = PathParam(..., ge=1, le=6),
        registry: PipelineRegistry = Depends(get_registry),  # noqa: B008
    ) -> dict[str, Any]:
        """Rerun a stage, marking later records stale.

        Raises:
            HTTPException: 404 if the pipeline is unknown, 409 on a state error
        """
        pipeline = _get_pipeline(registry, pipeline_id)
        try:
            artifact = await pipeline.regenerate(stage)
        except PipelineError as exc:
            raise _to_http_error(pipeline_id, exc) from None
        return artifact.model_dump(mode="json")

    @router.post("/{pipeline_id}/jump/{stage}", response_model=PipelineSummary)
    async def jump_to_stage(
        pipeline_id: str,
        stage: int = PathParam(..., ge=0, le=6),
        registry: PipelineRegistry = Depends(get_registry),  # noqa: B008
    ) -> dict[str, Any]:
        """Move the stage pointer to a completed stage.

        Raises:
            HTTPException: 404 if the pipeline is unknown, 409 if the stage
                was never completed
        """
        pipeline = _get_pipeline(registry, pipeline_id)
        try:
            pipeline.jump_to(stage)
        except PipelineError as exc:
            raise _to_http_error(pipeline_id, exc) from None
        return pipeline.summary()

    @router.get("/{pipeline_id}/artifacts/{stage}")
    async def get_artifact(
        pipeline_id: str,
        stage: int = PathParam(..., ge=1, le=6),
        registry: PipelineRegistry = Depends(get_registry),  # noqa: B008
    ) -> dict[str, Any]:
        """Get the stored artifact of a stage.

        Raises:
            HTTPException: 404 if the pipeline is unknown or the stage has
                no record
        """
        pipeline = _get_pipeline(registry, pipeline_id)
        record = pipeline.state.record(Stage(stage))
        if record is None:
            raise HTTPException(
                status_code=http_status.HTTP_404_NOT_FOUND,
                detail=f"Stage {stage} ({STAGE_LABELS[Stage(stage)]}) has not been completed",
            )
        return record.artifact.model_dump(mode="json")

    @router.get("/{pipeline_id}/graph/{mode}")
    async def get_graph(
        pipeline_id: str,
        mode: ProjectionMode,
        registry: PipelineRegistry = Depends(get_registry),  # noqa: B008
    ) -> dict[str, Any]:
        """Project the design artifacts into one of the five graph views.

        Raises:
            HTTPException: 404 if the pipeline is unknown, 409 if stages 1-4
                are not all completed
        """
        pipeline = _get_pipeline(registry, pipeline_id)
        try:
            graph = pipeline.graph(mode)
        except PipelineError as exc:
            raise _to_http_error(pipeline_id, exc) from None
        return graph.model_dump(mode="json")

    @router.get("/{pipeline_id}/project")
    async def get_project(
        pipeline_id: str,
        registry: PipelineRegistry = Depends(get_registry),  # noqa: B008
    ) -> dict[str, Any]:
        """Get the assembled project.

        Raises:
            HTTPException: 404 if the pipeline is unknown or not yet assembled
        """
        pipeline = _get_pipeline(registry, pipeline_id)
        project = pipeline.state.project
        if project is None:
            raise HTTPException(
                status_code=http_status.HTTP_404_NOT_FOUND,
                detail="Project has not been assembled yet",
            )
        return project.model_dump(mode="json")

    @router.delete("/{pipeline_id}", status_code=http_status.HTTP_204_NO_CONTENT)
    async def delete_pipeline(
        pipeline_id: str,
        registry: PipelineRegistry = Depends(get_registry),  # noqa: B008
    ) -> None:
        """Delete a pipeline session.

        A generation still in flight for the pipeline is superseded.

        Raises:
            HTTPException: 404 if the pipeline is unknown
        """
        try:
            registry.remove(pipeline_id)
        except PipelineNotFoundError:
            logger.warning("pipeline_not_found_for_deletion", pipeline_id=pipeline_id)
            raise HTTPException(
                status_code=http_status.HTTP_404_NOT_FOUND,
                detail=f"Pipeline {pipeline_id} not found",
            ) from None

    return router
