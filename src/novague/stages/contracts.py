"""Stage contracts: backend first, mock generator on any failure.

Every stage follows the same contract. When a generation backend is present
and a credential is configured, the stage prompt is sent and the result is
validated against the stage schema. Any exception (network, auth, timeout,
schema) is logged and the matching mock generator produces the artifact
instead, so a stage never fails because of the backend.

Example usage:
    >>> context = StageContext(config=NovagueConfig())
    >>> analysis = await analyze_idea("an online shop", context)
    >>> ux = await design_ux(analysis, context)
"""

from __future__ import annotations

import asyncio
import random
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

import structlog
from pydantic import BaseModel

from novague.config import NovagueConfig, PipelineConfig
from novague.generation import prompts
from novague.generation.backend import GenerationBackend
from novague.linking import link_component_endpoints
from novague.mock import mock_analysis, mock_components, mock_data, mock_ux
from novague.models.analysis import ProjectAnalysis
from novague.models.components import ComponentArchitecture
from novague.models.data import DataArchitecture
from novague.models.ux import ScreenAnalysis
from novague.models.validation import ValidationResult
from novague.validation.validator import IntegrationValidator, build_result

logger = structlog.get_logger(__name__)

ArtifactT = TypeVar("ArtifactT", bound=BaseModel)


def build_validator(config: PipelineConfig) -> IntegrationValidator:
    """Create the validator, with issue injection only when a rate is configured."""
    if config.validator_injection_rate > 0:
        return IntegrationValidator(
            rng=random.Random(config.validator_seed),
            injection_rate=config.validator_injection_rate,
        )
    return IntegrationValidator()


@dataclass
class StageContext:
    """Everything a stage needs besides its prior artifacts.

    Attributes:
        config: Root configuration (generation and pipeline sections are used)
        backend: Generation backend, None to always use the mocks
        validator: Integration validator; built from the pipeline config when None
    """

    config: NovagueConfig
    backend: GenerationBackend | None = None
    validator: IntegrationValidator | None = None

    @property
    def uses_backend(self) -> bool:
        """Whether stages will attempt the backend before the mock."""
        return self.backend is not None and self.config.generation.has_credential


async def run_stage(
    stage: str,
    context: StageContext,
    prompt: str,
    schema: type[ArtifactT],
    mock: Callable[[], ArtifactT],
) -> ArtifactT:
    """Run one stage contract.

    Args:
        stage: Stage name used in logs
        context: Stage context
        prompt: Natural-language prompt for the backend
        schema: Artifact schema the backend result must satisfy
        mock: Zero-argument mock generator producing the fallback artifact

    Returns:
        The backend artifact, or the mock artifact if the backend is not
        configured or failed
    """
    # Backend first, only with a credential
    backend = context.backend
    if backend is not None and context.uses_backend:
        try:
            artifact = await backend.generate(context.config.generation, prompt, schema)
        except Exception as e:
            logger.warning(
                "stage_backend_failed",
                stage=stage,
                error=str(e),
                error_type=type(e).__name__,
            )
        else:
            logger.info("stage_generated", stage=stage, source="backend")
            return artifact

    # Mock fallback, paced like a backend call
    delay = context.config.pipeline.mock_delay_seconds
    if delay > 0:
        await asyncio.sleep(delay)

    artifact = mock()
    logger.info("stage_generated", stage=stage, source="mock")
    return artifact


async def analyze_idea(idea: str, context: StageContext) -> ProjectAnalysis:
    """Stage 1: analyze the idea."""
    return await run_stage(
        "analysis",
        context,
        prompts.analysis_prompt(idea),
        ProjectAnalysis,
        lambda: mock_analysis(idea),
    )


async def design_ux(analysis: ProjectAnalysis, context: StageContext) -> ScreenAnalysis:
    """Stage 2: design screens, flows and background processes."""
    return await run_stage(
        "ux",
        context,
        prompts.ux_prompt(analysis),
        ScreenAnalysis,
        lambda: mock_ux(analysis),
    )


async def design_data(
    analysis: ProjectAnalysis, ux: ScreenAnalysis, context: StageContext
) -> DataArchitecture:
    """Stage 3: design tables, endpoints and policies."""
    return await run_stage(
        "data",
        context,
        prompts.data_prompt(analysis, ux),
        DataArchitecture,
        lambda: mock_data(analysis, ux),
    )


async def design_components(
    ux: ScreenAnalysis, data: DataArchitecture, context: StageContext
) -> ComponentArchitecture:
    """Stage 4: design components and record their endpoint links."""
    components = await run_stage(
        "components",
        context,
        prompts.components_prompt(ux, data),
        ComponentArchitecture,
        lambda: mock_components(ux, data),
    )
    return link_component_endpoints(components, data)


async def validate_integration(
    analysis: ProjectAnalysis,
    ux: ScreenAnalysis,
    data: DataArchitecture,
    components: ComponentArchitecture,
    context: StageContext,
) -> ValidationResult:
    """Stage 5: validate the design.

    Backend results are re-scored from their issues so that score and
    validity always follow the same rule as the local validator.
    """
    validator = context.validator or build_validator(context.config.pipeline)
    result = await run_stage(
        "validation",
        context,
        prompts.validation_prompt(analysis, ux, data, components),
        ValidationResult,
        lambda: validator.validate(analysis, ux, data, components),
    )
    return build_result(result.issues, result.suggestions, result.optimizations)
