"""Unit tests for the design pipeline state machine.

Tests cover:
- Forward progress through all six stages
- Precondition and completion errors
- Regeneration versions and stale marking
- Jumping back and resetting
- The single in-flight generation rule and stale result discarding
"""

from __future__ import annotations

import asyncio

import pytest

from novague.config import GenerationConfig, NovagueConfig
from novague.generation.backend import GenerationConnectionError
from novague.models.analysis import ProjectAnalysis
from novague.models.graph import ProjectionMode
from novague.models.project import Project
from novague.pipeline.orchestrator import (
    DesignPipeline,
    PipelineBusyError,
    PipelineError,
    PreconditionError,
    StageAlreadyCompletedError,
    StageNotCompletedError,
    StaleGenerationError,
)
from novague.pipeline.state import PipelineState, Stage
from novague.stages.contracts import StageContext

IDEA = "an Instagram-like photo sharing app"


class GatedBackend:
    """Backend that blocks until released, then fails so the mock is used."""

    def __init__(self) -> None:
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def generate(self, config, prompt, schema):
        self.started.set()
        await self.release.wait()
        raise GenerationConnectionError("gate released")


@pytest.fixture
def pipeline(stage_context: StageContext) -> DesignPipeline:
    """Pipeline with the idea submitted."""
    design = DesignPipeline(stage_context, pipeline_id="test-pipeline")
    design.submit_idea(IDEA)
    return design


@pytest.fixture
def gated() -> tuple[DesignPipeline, GatedBackend]:
    """Pipeline whose backend calls block until released."""
    backend = GatedBackend()
    context = StageContext(
        config=NovagueConfig(generation=GenerationConfig(api_key="sk-test")),
        backend=backend,
    )
    design = DesignPipeline(context)
    design.submit_idea(IDEA)
    return design, backend


async def _advance_through(pipeline: DesignPipeline, last: int) -> None:
    for stage in range(1, last + 1):
        await pipeline.advance(stage)


class TestForwardProgress:
    """Test running stages in order."""

    @pytest.mark.asyncio
    async def test_full_run(self, pipeline: DesignPipeline) -> None:
        """Test that all six stages complete and the pointer follows."""
        await _advance_through(pipeline, 6)

        assert pipeline.state.current == Stage.VISUALIZED
        assert pipeline.state.stages_completed == [True] * 7
        assert isinstance(pipeline.state.project, Project)
        assert pipeline.state.validation.score == 100

    @pytest.mark.asyncio
    async def test_advance_returns_artifact(self, pipeline: DesignPipeline) -> None:
        """Test that the stage artifact is returned and stored."""
        artifact = await pipeline.advance(Stage.ANALYZED)

        assert isinstance(artifact, ProjectAnalysis)
        assert pipeline.state.analysis is artifact
        assert pipeline.state.record(Stage.ANALYZED).version == 1

    @pytest.mark.asyncio
    async def test_summary(self, pipeline: DesignPipeline) -> None:
        """Test the serializable overview."""
        await _advance_through(pipeline, 2)

        summary = pipeline.summary()

        assert summary["id"] == "test-pipeline"
        assert summary["idea"] == IDEA
        assert summary["current_stage"] == 2
        assert summary["stages_completed"] == [True, True, True, False, False, False, False]
        assert summary["is_generating"] is False
        assert summary["records"] == {
            "1": {"version": 1, "stale": False},
            "2": {"version": 1, "stale": False},
        }

    def test_initial_state(self, stage_context: StageContext) -> None:
        """Test that a new pipeline is idle with no records."""
        design = DesignPipeline(stage_context)
        assert design.state.current == Stage.IDLE
        assert design.state.stages_completed == [True] + [False] * 6
        assert design.context.validator is not None


class TestPreconditions:
    """Test stage preconditions and completion rules."""

    @pytest.mark.asyncio
    async def test_analysis_needs_idea(self, stage_context: StageContext) -> None:
        """Test that stage 1 requires an idea."""
        design = DesignPipeline(stage_context)
        with pytest.raises(PreconditionError) as exc_info:
            await design.advance(1)
        assert exc_info.value.missing == [Stage.IDLE]

    @pytest.mark.asyncio
    async def test_missing_artifacts_reported(self, pipeline: DesignPipeline) -> None:
        """Test that the consumed artifacts must exist."""
        await pipeline.advance(1)

        with pytest.raises(PreconditionError) as exc_info:
            await pipeline.advance(4)

        assert exc_info.value.stage == Stage.COMPONENTS_DESIGNED
        assert exc_info.value.missing == [Stage.UX_DESIGNED, Stage.DATA_DESIGNED]
        assert "UX Flow" in str(exc_info.value)
        assert not pipeline.state.is_completed(Stage.COMPONENTS_DESIGNED)

    @pytest.mark.asyncio
    async def test_assembly_needs_validation(self, pipeline: DesignPipeline) -> None:
        """Test that stage 6 requires stage 5."""
        await _advance_through(pipeline, 4)
        with pytest.raises(PreconditionError) as exc_info:
            await pipeline.advance(6)
        assert exc_info.value.missing == [Stage.VALIDATED]

    @pytest.mark.asyncio
    async def test_advance_completed_stage(self, pipeline: DesignPipeline) -> None:
        """Test that advancing twice is rejected."""
        await pipeline.advance(1)
        with pytest.raises(StageAlreadyCompletedError, match="use regenerate"):
            await pipeline.advance(1)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("stage", [0, 7, -1])
    async def test_invalid_stage_numbers(self, pipeline: DesignPipeline, stage: int) -> None:
        """Test that only stages 1-6 can be generated."""
        with pytest.raises(ValueError):
            await pipeline.advance(stage)

    @pytest.mark.asyncio
    async def test_failed_precondition_leaves_pipeline_idle(self, pipeline: DesignPipeline) -> None:
        """Test that a rejected call does not mark the pipeline busy."""
        with pytest.raises(PreconditionError):
            await pipeline.advance(3)
        assert pipeline.is_generating is False
        assert pipeline.epoch == 0


class TestIdea:
    """Test idea submission."""

    def test_blank_idea_rejected(self, stage_context: StageContext) -> None:
        """Test that blank ideas are rejected."""
        with pytest.raises(ValueError):
            DesignPipeline(stage_context).submit_idea("   ")

    def test_idea_is_trimmed(self, stage_context: StageContext) -> None:
        """Test that surrounding whitespace is dropped."""
        design = DesignPipeline(stage_context)
        design.submit_idea("  a recipe app \n")
        assert design.state.idea == "a recipe app"

    @pytest.mark.asyncio
    async def test_idea_frozen_after_analysis(self, pipeline: DesignPipeline) -> None:
        """Test that the idea can change only before stage 1 runs."""
        pipeline.submit_idea("an online shop")
        await pipeline.advance(1)
        with pytest.raises(PipelineError):
            pipeline.submit_idea("a recipe app")
        assert pipeline.state.idea == "an online shop"


class TestRegenerate:
    """Test regeneration of completed stages."""

    @pytest.mark.asyncio
    async def test_version_bump_and_stale_marking(self, pipeline: DesignPipeline) -> None:
        """Test that later records go stale and earlier ones do not."""
        await _advance_through(pipeline, 4)

        await pipeline.regenerate(Stage.UX_DESIGNED)

        records = pipeline.state.records
        assert records[2].version == 2
        assert records[2].stale is False
        assert records[1].stale is False
        assert records[3].stale is True
        assert records[4].stale is True
        assert pipeline.state.current == Stage.UX_DESIGNED

    @pytest.mark.asyncio
    async def test_regenerating_stale_stage_clears_its_flag(self, pipeline: DesignPipeline) -> None:
        """Test that a regenerated record is fresh again."""
        await _advance_through(pipeline, 3)
        await pipeline.regenerate(1)
        assert pipeline.state.records[3].stale is True

        await pipeline.regenerate(3)

        assert pipeline.state.records[3].stale is False
        assert pipeline.state.records[3].version == 2

    @pytest.mark.asyncio
    async def test_regenerate_runs_missing_stage(self, pipeline: DesignPipeline) -> None:
        """Test that regenerating a never-run stage behaves like advance."""
        artifact = await pipeline.regenerate(1)
        assert pipeline.state.analysis is artifact
        assert pipeline.state.records[1].version == 1

    @pytest.mark.asyncio
    async def test_regenerate_checks_preconditions(self, pipeline: DesignPipeline) -> None:
        """Test that regeneration still needs the consumed artifacts."""
        with pytest.raises(PreconditionError):
            await pipeline.regenerate(2)


class TestJumpAndReset:
    """Test moving the pointer back and clearing the pipeline."""

    @pytest.mark.asyncio
    async def test_jump_keeps_records(self, pipeline: DesignPipeline) -> None:
        """Test that jumping back never clears records."""
        await _advance_through(pipeline, 3)

        pipeline.jump_to(1)

        assert pipeline.state.current == Stage.ANALYZED
        assert pipeline.state.stages_completed[:4] == [True] * 4
        with pytest.raises(StageAlreadyCompletedError):
            await pipeline.advance(2)

    @pytest.mark.asyncio
    async def test_jump_to_incomplete_stage(self, pipeline: DesignPipeline) -> None:
        """Test that only completed stages can be revisited."""
        await pipeline.advance(1)
        with pytest.raises(StageNotCompletedError):
            pipeline.jump_to(Stage.DATA_DESIGNED)

    def test_jump_to_idle(self, pipeline: DesignPipeline) -> None:
        """Test that the idea stage is always reachable."""
        pipeline.jump_to(0)
        assert pipeline.state.current == Stage.IDLE

    @pytest.mark.asyncio
    async def test_reset(self, pipeline: DesignPipeline) -> None:
        """Test that reset clears the idea and every record."""
        await _advance_through(pipeline, 2)

        pipeline.reset()

        assert pipeline.state == PipelineState()
        with pytest.raises(PreconditionError):
            await pipeline.advance(1)


class TestGraph:
    """Test graph projection through the pipeline."""

    @pytest.mark.asyncio
    async def test_needs_design_stages(self, pipeline: DesignPipeline) -> None:
        """Test that projections need stages 1-4."""
        await _advance_through(pipeline, 3)
        with pytest.raises(PreconditionError) as exc_info:
            pipeline.graph(ProjectionMode.architecture)
        assert exc_info.value.missing == [Stage.COMPONENTS_DESIGNED]

    @pytest.mark.asyncio
    async def test_projection_by_name(self, pipeline: DesignPipeline) -> None:
        """Test that modes can be given by value."""
        await _advance_through(pipeline, 4)
        graph = pipeline.graph("dependency-graph")
        assert graph.mode == ProjectionMode.dependency_graph
        assert graph.nodes

    @pytest.mark.asyncio
    async def test_unknown_mode(self, pipeline: DesignPipeline) -> None:
        """Test that unknown modes are rejected."""
        await _advance_through(pipeline, 4)
        with pytest.raises(ValueError):
            pipeline.graph("org-chart")


class TestConcurrency:
    """Test the single in-flight generation rule."""

    @pytest.mark.asyncio
    async def test_busy_while_generating(self, gated) -> None:
        """Test that a second trigger during generation is rejected."""
        design, backend = gated
        task = asyncio.create_task(design.advance(1))
        await backend.started.wait()

        assert design.is_generating is True
        with pytest.raises(PipelineBusyError):
            await design.regenerate(1)

        backend.release.set()
        artifact = await task

        assert design.is_generating is False
        assert design.state.analysis is artifact

    @pytest.mark.asyncio
    async def test_reset_discards_in_flight_result(self, gated) -> None:
        """Test that a result arriving after reset is not applied."""
        design, backend = gated
        task = asyncio.create_task(design.advance(1))
        await backend.started.wait()

        design.reset()
        backend.release.set()

        with pytest.raises(StaleGenerationError) as exc_info:
            await task
        assert exc_info.value.stage == Stage.ANALYZED
        assert exc_info.value.token < exc_info.value.epoch
        assert design.state.records == {}
        assert design.is_generating is False

    @pytest.mark.asyncio
    async def test_jump_discards_in_flight_result(self, gated) -> None:
        """Test that a result arriving after a jump is not applied."""
        design, backend = gated
        backend.release.set()
        await design.advance(1)

        backend.started.clear()
        backend.release.clear()
        task = asyncio.create_task(design.regenerate(1))
        await backend.started.wait()

        design.jump_to(0)
        backend.release.set()

        with pytest.raises(StaleGenerationError):
            await task
        assert design.state.records[1].version == 1
        assert design.state.current == Stage.IDLE
