"""In-memory registry of pipeline sessions served by the web app."""

from __future__ import annotations

import structlog

from novague.config import NovagueConfig
from novague.generation.backend import GenerationBackend
from novague.pipeline.orchestrator import DesignPipeline
from novague.stages.contracts import StageContext, build_validator

logger = structlog.get_logger(__name__)


class PipelineNotFoundError(KeyError):
    """Raised when a pipeline id is not registered."""


class PipelineRegistry:
    """Creates pipelines that share one config and backend.

    Each pipeline gets its own validator so that seeded issue injection is
    reproducible per session.
    """

    def __init__(self, config: NovagueConfig, backend: GenerationBackend | None = None) -> None:
        self.config = config
        self.backend = backend
        self._pipelines: dict[str, DesignPipeline] = {}

    def __len__(self) -> int:
        return len(self._pipelines)

    def create(self, idea: str) -> DesignPipeline:
        """Create a pipeline and submit its idea.

        Raises:
            ValueError: If the idea is blank
        """
        context = StageContext(
            config=self.config,
            backend=self.backend,
            validator=build_validator(self.config.pipeline),
        )
        pipeline = DesignPipeline(context)
        pipeline.submit_idea(idea)
        self._pipelines[pipeline.id] = pipeline
        logger.info("pipeline_created", pipeline_id=pipeline.id)
        return pipeline

    def get(self, pipeline_id: str) -> DesignPipeline:
        """Return a registered pipeline.

        Raises:
            PipelineNotFoundError: If no pipeline has that id
        """
        try:
            return self._pipelines[pipeline_id]
        except KeyError as e:
            raise PipelineNotFoundError(pipeline_id) from e

    def remove(self, pipeline_id: str) -> None:
        """Drop a pipeline and supersede any generation it has in flight.

        Raises:
            PipelineNotFoundError: If no pipeline has that id
        """
        try:
            pipeline = self._pipelines.pop(pipeline_id)
        except KeyError as e:
            raise PipelineNotFoundError(pipeline_id) from e
        # Late results of an in-flight stage are discarded
        pipeline.reset()
        logger.info("pipeline_removed", pipeline_id=pipeline_id)
