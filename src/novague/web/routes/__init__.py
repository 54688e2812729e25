"""FastAPI route definitions for the NoVague web interface."""

from __future__ import annotations

from novague.web.routes.health import (
    HealthResponse,
    ReadinessResponse,
    create_health_router,
)
from novague.web.routes.pipelines import (
    PipelineCreate,
    PipelineSummary,
    create_pipelines_router,
)
from novague.web.routes.prompts import (
    PromptRequest,
    PromptResponse,
    create_prompts_router,
)

__all__ = [
    # Health
    "HealthResponse",
    "ReadinessResponse",
    "create_health_router",
    # Pipelines
    "PipelineCreate",
    "PipelineSummary",
    "create_pipelines_router",
    # Prompts
    "PromptRequest",
    "PromptResponse",
    "create_prompts_router",
]
