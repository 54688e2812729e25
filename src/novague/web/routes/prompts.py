"""Prompt export endpoint.

``POST /api/generate-prompt`` renders the implementation prompt for one node
of an assembled project.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException
from fastapi import status as http_status
from pydantic import BaseModel

from novague.export.prompts import generate_component_prompt
from novague.logging import get_logger
from novague.models.project import Project, ProjectNode

logger = get_logger(__name__)


class PromptRequest(BaseModel):
    """Request schema for prompt generation.

    Attributes:
        component: Node to implement
        project: Project the node belongs to
    """

    component: ProjectNode | None = None
    project: Project | None = None


class PromptResponse(BaseModel):
    """Generated prompt text."""

    prompt: str


def create_prompts_router() -> APIRouter:
    """Create the prompt export router.

    Routes:
        POST /api/generate-prompt - Render a node implementation prompt
    """
    router = APIRouter(prefix="/api", tags=["prompts"])

    @router.post("/generate-prompt", response_model=PromptResponse)
    async def generate_prompt(body: PromptRequest) -> dict[str, Any]:
        """Render the implementation prompt for a project node.

        Raises:
            HTTPException: 400 if the component or the project is missing
        """
        try:
            prompt = generate_component_prompt(body.component, body.project)
        except ValueError as exc:
            logger.warning("prompt_request_rejected", error=str(exc))
            raise HTTPException(
                status_code=http_status.HTTP_400_BAD_REQUEST,
                detail=str(exc),
            ) from None
        return {"prompt": prompt}

    return router
