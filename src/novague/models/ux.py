"""UX flow artifact (stage 2): screens, user flows and background processes."""

from __future__ import annotations

from typing import Literal

from pydantic import Field, model_validator

from novague.models.base import ArtifactModel

ScreenType = Literal["page", "modal", "drawer", "overlay"]
AuthLevel = Literal["public", "protected", "admin"]
ProcessType = Literal["webhook", "cron", "realtime", "queue"]


class ScreenStates(ArtifactModel):
    """Copy shown for each screen state."""

    loading: str = Field(default="Loading...")
    empty: str = Field(default="Nothing here yet")
    error: str = Field(default="Something went wrong")
    success: str = Field(default="Done")


class PerformanceTargets(ArtifactModel):
    """Screen performance targets."""

    load_time: str = Field(default="1.5s")
    interaction_delay: str = Field(default="100ms")


class Screen(ArtifactModel):
    """A single screen of the application.

    Attributes:
        id: Stable screen identifier, unique within the artifact
        name: Display name
        type: Presentation kind
        route: URL route
        authentication: Required authentication level
        permissions: Permissions required beyond the auth level
    """

    id: str = Field(..., min_length=1, description="Screen identifier")
    name: str = Field(..., description="Screen name")
    type: ScreenType = Field(default="page")
    route: str = Field(default="", description="URL route")
    description: str = Field(default="")
    user_story: str = Field(default="")
    acceptance_criteria: list[str] = Field(default_factory=list)
    states: ScreenStates = Field(default_factory=ScreenStates)
    authentication: AuthLevel = Field(default="public")
    permissions: list[str] = Field(default_factory=list)
    performance_targets: PerformanceTargets = Field(default_factory=PerformanceTargets)


class FlowStep(ArtifactModel):
    """One step of a user flow.

    ``screen`` and ``next_screen`` reference a screen id or name; the special
    target ``terminate`` ends the flow.
    """

    screen: str = Field(..., description="Source screen id or name")
    action: str = Field(..., description="User action")
    condition: str | None = Field(default=None, description="Optional guard")
    next_screen: str = Field(..., description="Target screen id or name")


class UserFlow(ArtifactModel):
    """An ordered user journey through screens."""

    id: str = Field(..., description="Flow identifier")
    name: str = Field(..., description="Flow name")
    steps: list[FlowStep] = Field(default_factory=list)
    alternative_flows: list[list[FlowStep]] = Field(default_factory=list)


class BackgroundProcess(ArtifactModel):
    """A non-interactive process supporting one or more screens."""

    id: str = Field(..., description="Process identifier")
    name: str = Field(..., description="Process name")
    type: ProcessType = Field(..., description="Trigger kind")
    trigger: str = Field(default="", description="Trigger description")
    description: str = Field(default="")
    related_screens: list[str] = Field(default_factory=list)


class ScreenAnalysis(ArtifactModel):
    """Stage 2 artifact.

    Raises:
        ValueError: On validation if two screens share an id.
    """

    screens: list[Screen] = Field(..., min_length=1)
    user_flows: list[UserFlow] = Field(default_factory=list)
    background_processes: list[BackgroundProcess] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_unique_screen_ids(self) -> ScreenAnalysis:
        """Reject artifacts with duplicate screen ids."""
        seen: set[str] = set()
        for screen in self.screens:
            if screen.id in seen:
                raise ValueError(f"Duplicate screen id: {screen.id}")
            seen.add(screen.id)
        return self

    def get_screen(self, screen_id: str) -> Screen | None:
        """Return the screen with the given id, if any."""
        return next((s for s in self.screens if s.id == screen_id), None)

    def resolve_screen(self, ref: str) -> Screen | None:
        """Resolve a flow reference against screen ids, then names.

        Each screen is tested against both its id and its name in order;
        the first matching screen wins.
        """
        return next((s for s in self.screens if ref in (s.id, s.name)), None)
