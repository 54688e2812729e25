"""Component architecture artifact (stage 4).

Every component carries a stable ``id``. Components that arrive without one
(for example from a generation backend) are assigned
``<screen_id>.<Name>`` or ``shared.<Name>`` when the artifact is validated;
colliding ids get a numeric suffix so that ids stay unique within a run.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any, Literal

from pydantic import Field, model_validator

from novague.models.base import ArtifactModel

ComponentType = Literal["layout", "feature", "ui", "form"]
ComponentComplexity = Literal["low", "medium", "high"]


class PropDefinition(ArtifactModel):
    """A component prop."""

    name: str
    type: str
    required: bool = False
    description: str = ""


class StateDefinition(ArtifactModel):
    """A piece of internal component state."""

    name: str
    type: str
    initial_value: Any = None
    description: str = ""


class EventDefinition(ArtifactModel):
    """An event emitted by a component."""

    name: str
    payload_type: str | None = None
    description: str = ""


class MethodDefinition(ArtifactModel):
    """A public method exposed by a component."""

    name: str
    return_type: str = "void"
    description: str = ""


class ComponentDependencies(ArtifactModel):
    """Declared dependencies of a component.

    Attributes:
        components: Component ids or names
        hooks: Hook names
        apis: Endpoint references, usually ``METHOD /path``
        libraries: Third-party libraries
    """

    components: list[str] = Field(default_factory=list)
    hooks: list[str] = Field(default_factory=list)
    apis: list[str] = Field(default_factory=list)
    libraries: list[str] = Field(default_factory=list)


class ComponentStyling(ArtifactModel):
    """Styling decisions for a component."""

    framework: str = "Tailwind CSS"
    responsive: bool = True
    animations: list[str] = Field(default_factory=list)
    variants: list[str] = Field(default_factory=list)


class Component(ArtifactModel):
    """A UI component specification.

    ``endpoint_ids`` holds the explicit links to endpoints of the data
    architecture, recorded when the component artifact is produced.
    """

    id: str = Field(default="", description="Stable component identifier")
    name: str = Field(..., min_length=1, description="Component name")
    type: ComponentType = Field(..., description="Component kind")
    file_path: str = Field(default="")
    description: str = Field(default="")
    responsibility: str = Field(default="")
    props: list[PropDefinition] = Field(default_factory=list)
    state: list[StateDefinition] = Field(default_factory=list)
    events: list[EventDefinition] = Field(default_factory=list)
    methods: list[MethodDefinition] = Field(default_factory=list)
    dependencies: ComponentDependencies = Field(default_factory=ComponentDependencies)
    styling: ComponentStyling = Field(default_factory=ComponentStyling)
    test_scenarios: list[str] = Field(default_factory=list)
    mock_data: dict[str, Any] = Field(default_factory=dict)
    estimated_complexity: ComponentComplexity = Field(default="low")
    rerender_optimization: list[str] = Field(default_factory=list)
    endpoint_ids: list[str] = Field(default_factory=list)


class SharedComponent(Component):
    """A component reused across screens."""

    usage_count: int = Field(default=0, ge=0)


class LayoutSpec(ArtifactModel):
    """The layout wrapper of a screen."""

    name: str
    file_path: str = ""
    description: str = ""


class ScreenComponents(ArtifactModel):
    """Components belonging to a single screen."""

    screen_id: str
    layout: LayoutSpec
    feature_components: list[Component] = Field(default_factory=list)
    ui_components: list[Component] = Field(default_factory=list)

    def components(self) -> list[Component]:
        """Feature components followed by UI components."""
        return [*self.feature_components, *self.ui_components]


class LibraryChoice(ArtifactModel):
    """A component library the design relies on."""

    name: str
    version: str = "latest"
    usage: str = ""


class ComponentArchitecture(ArtifactModel):
    """Stage 4 artifact."""

    screens: list[ScreenComponents] = Field(default_factory=list)
    shared_components: list[SharedComponent] = Field(default_factory=list)
    component_library: list[LibraryChoice] = Field(default_factory=list)

    @model_validator(mode="after")
    def assign_component_ids(self) -> ComponentArchitecture:
        """Give every component a unique, stable id."""
        taken: set[str] = set()

        def claim(component: Component, prefix: str) -> None:
            # Backend-supplied ids are kept; missing ones derive from the screen
            base = component.id or f"{prefix}.{component.name}"
            candidate = base
            # Collisions get -2, -3, ... in document order
            suffix = 2
            while candidate in taken:
                candidate = f"{base}-{suffix}"
                suffix += 1
            component.id = candidate
            taken.add(candidate)

        for group in self.screens:
            for component in group.components():
                claim(component, group.screen_id)
        # Shared pool after every screen
        for shared in self.shared_components:
            claim(shared, "shared")
        return self

    def iter_components(self) -> Iterator[tuple[str | None, Component]]:
        """Yield ``(screen_id, component)`` for every component.

        Shared components are yielded last with a ``None`` screen id.
        """
        for group in self.screens:
            for component in group.components():
                yield group.screen_id, component
        for shared in self.shared_components:
            yield None, shared

    def all_components(self) -> list[Component]:
        """Every feature, UI and shared component."""
        return [component for _, component in self.iter_components()]

    def get_component(self, component_id: str) -> Component | None:
        """Return the component with the given id, if any."""
        return next((c for c in self.all_components() if c.id == component_id), None)

    def for_screen(self, screen_id: str) -> ScreenComponents | None:
        """Return the component group of a screen, if any."""
        return next((g for g in self.screens if g.screen_id == screen_id), None)
