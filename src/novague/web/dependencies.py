"""FastAPI dependencies reading shared objects from app state."""

from __future__ import annotations

from fastapi import Request

from novague.pipeline.registry import PipelineRegistry


def get_registry(request: Request) -> PipelineRegistry:
    """Dependency that retrieves the pipeline registry from app state.

    Args:
        request: FastAPI request object

    Returns:
        Pipeline registry from app.state
    """
    return request.app.state.registry  # type: ignore[no-any-return]
