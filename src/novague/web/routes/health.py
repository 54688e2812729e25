"""Health check endpoints.

``/health/`` is a plain liveness check. ``/health/ready`` also reports
whether stages will call the generation backend or run on the mock
generators only.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from novague.logging import get_logger
from novague.pipeline.registry import PipelineRegistry
from novague.web.dependencies import get_registry

logger = get_logger(__name__)


class HealthResponse(BaseModel):
    """Health check response model.

    Attributes:
        status: Current health status
    """

    status: str


class ReadinessResponse(BaseModel):
    """Readiness check response model.

    Attributes:
        status: Current readiness status
        backend: "configured" when a backend and credential are present, else "mock"
        pipelines: Number of registered pipelines
    """

    status: str
    backend: str
    pipelines: int


def create_health_router() -> APIRouter:
    """Create health check router.

    Routes:
        GET /health/ - Basic liveness check
        GET /health/ready - Readiness with generation mode
    """
    router = APIRouter(prefix="/health", tags=["health"])

    @router.get("/", response_model=HealthResponse)
    async def health() -> dict[str, Any]:
        """Basic liveness check."""
        return {"status": "ok"}

    @router.get("/ready", response_model=ReadinessResponse)
    async def readiness(
        registry: PipelineRegistry = Depends(get_registry),  # noqa: B008
    ) -> dict[str, Any]:
        """Readiness check reporting the generation mode."""
        configured = (
            registry.backend is not None and registry.config.generation.has_credential
        )
        backend = "configured" if configured else "mock"
        logger.debug("readiness_check_passed", backend=backend)
        return {"status": "ok", "backend": backend, "pipelines": len(registry)}

    return router
