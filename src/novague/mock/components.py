"""Deterministic component architecture from the UX and data artifacts."""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass

from novague.mock.rules import KeywordRule, first_match
from novague.models.components import (
    Component,
    ComponentArchitecture,
    ComponentDependencies,
    EventDefinition,
    LayoutSpec,
    LibraryChoice,
    PropDefinition,
    ScreenComponents,
    SharedComponent,
    StateDefinition,
)
from novague.models.data import DataArchitecture
from novague.models.ux import Screen, ScreenAnalysis

SHARED_UI = ("Button", "Input", "Card", "Modal", "Avatar")


@dataclass(frozen=True)
class ComponentSpec:
    """Feature component template.

    ``apis`` are ``METHOD /path`` references; ``components`` are names of
    other components this one renders.
    """

    name: str
    type: str
    description: str
    apis: tuple[str, ...] = ()
    components: tuple[str, ...] = ()
    hooks: tuple[str, ...] = ()
    libraries: tuple[str, ...] = ()


# Matched against screen ids as plain substrings; first match wins
FEATURE_RULES: tuple[KeywordRule, ...] = (
    KeywordRule(
        ("login", "signup"),
        (
            ComponentSpec(
                "AuthForm",
                "form",
                "Handles user authentication input and validation",
                apis=("POST /auth/login",),
                components=("Input", "Button"),
                hooks=("useAuth",),
                libraries=("react-hook-form",),
            ),
        ),
        substring=True,
    ),
    KeywordRule(
        ("feed", "post"),
        (
            ComponentSpec(
                "PostList",
                "feature",
                "Displays a list of posts with infinite scroll",
                apis=("GET /posts",),
                components=("PostCard",),
                hooks=("usePosts",),
            ),
            ComponentSpec(
                "PostCard",
                "feature",
                "Individual post item with interaction buttons",
                apis=("GET /posts/:id",),
                components=("Card", "Avatar", "Button"),
            ),
            ComponentSpec(
                "CreatePostModal",
                "form",
                "Form to create new posts with media upload",
                apis=("POST /posts",),
                components=("Modal", "Input", "Button"),
                libraries=("react-hook-form",),
            ),
        ),
        substring=True,
    ),
    KeywordRule(
        ("product",),
        (
            ComponentSpec(
                "ProductList",
                "feature",
                "Grid view of products with filters",
                apis=("GET /products",),
                components=("ProductCard",),
            ),
            ComponentSpec(
                "ProductCard",
                "feature",
                "Product summary card",
                apis=("GET /products/:id",),
                components=("Card", "Button"),
            ),
        ),
        substring=True,
    ),
    KeywordRule(
        ("cart",),
        (
            ComponentSpec(
                "CartItemList",
                "feature",
                "List of items in cart",
                components=("Card", "Button"),
                hooks=("useCartStore",),
                libraries=("zustand",),
            ),
            ComponentSpec(
                "OrderSummary",
                "feature",
                "Calculates total price and shipping",
                apis=("POST /orders",),
                components=("Card", "Button"),
            ),
        ),
        substring=True,
    ),
)

# Evaluated in order; the first predicate that holds picks the layout
LAYOUT_RULES: tuple[tuple[Callable[[Screen], bool], str], ...] = (
    (lambda s: s.type == "modal", "ModalLayout"),
    (lambda s: s.authentication == "admin", "AdminLayout"),
    (lambda s: s.authentication == "protected", "DashboardLayout"),
)
DEFAULT_LAYOUT = "PublicLayout"

COMPONENT_LIBRARY = (
    LibraryChoice(name="shadcn/ui", version="latest", usage="Base UI components"),
    LibraryChoice(name="lucide-react", version="latest", usage="Icons"),
    LibraryChoice(name="react-hook-form", version="latest", usage="Form handling"),
)


def layout_for(screen: Screen) -> str:
    """Pick the layout wrapper for a screen."""
    for predicate, name in LAYOUT_RULES:
        if predicate(screen):
            return name
    return DEFAULT_LAYOUT


def create_component(
    name: str,
    component_type: str,
    description: str,
    screen_id: str | None = None,
    dependencies: ComponentDependencies | None = None,
) -> Component:
    """Build a component with the standard props, state and events for its type."""
    shared = screen_id is None
    props = [
        PropDefinition(
            name="className", type="string", required=False, description="Additional CSS classes"
        )
    ]
    if component_type == "feature":
        props.append(
            PropDefinition(name="data", type="any", required=True, description="Data to display")
        )

    return Component(
        id=f"shared.{name}" if shared else f"{screen_id}.{name}",
        name=name,
        type=component_type,
        file_path=f"/components/ui/{name.lower()}.tsx"
        if shared
        else f"/components/{screen_id}/{name}.tsx",
        description=description,
        responsibility="Reusable UI element" if shared else "Business logic and composition",
        props=props,
        state=[
            StateDefinition(
                name="isLoading", type="boolean", initial_value=False, description="Submission state"
            )
        ]
        if component_type == "form"
        else [],
        events=[EventDefinition(name="onClick", description="Click handler")]
        if component_type == "ui"
        else [],
        dependencies=dependencies or ComponentDependencies(),
        test_scenarios=["Should render correctly", "Should handle interaction"],
        estimated_complexity="medium" if component_type == "feature" else "low",
    )


def _header_name(screen: Screen) -> str:
    return re.sub(r"[^0-9a-zA-Z]", "", screen.name) + "Header"


def mock_components(ux: ScreenAnalysis, data: DataArchitecture) -> ComponentArchitecture:
    """Synthesize per-screen and shared components.

    API references are kept only when the endpoint exists in ``data``.

    Args:
        ux: Stage 2 artifact
        data: Stage 3 artifact

    Returns:
        ComponentArchitecture with deterministic component ids
    """
    known_apis = {endpoint.signature for endpoint in data.endpoints}
    groups: list[ScreenComponents] = []

    for screen in ux.screens:
        specs: tuple[ComponentSpec, ...] = first_match(FEATURE_RULES, screen.id, default=())
        features = [
            create_component(
                spec.name,
                spec.type,
                spec.description,
                screen.id,
                ComponentDependencies(
                    components=list(spec.components),
                    hooks=list(spec.hooks),
                    apis=[api for api in spec.apis if api in known_apis],
                    libraries=list(spec.libraries),
                ),
            )
            for spec in specs
        ]
        header = create_component(
            _header_name(screen),
            "ui",
            f"Header specific for {screen.name}",
            screen.id,
            ComponentDependencies(
                components=["Avatar"] if screen.authentication != "public" else []
            ),
        )
        layout = layout_for(screen)
        groups.append(
            ScreenComponents(
                screen_id=screen.id,
                layout=LayoutSpec(
                    name=layout,
                    file_path=f"/components/layouts/{layout}.tsx",
                    description=f"Standard {layout} wrapper",
                ),
                feature_components=features,
                ui_components=[header],
            )
        )

    usage = Counter(
        dep
        for group in groups
        for component in group.components()
        for dep in component.dependencies.components
    )
    shared = [
        SharedComponent(
            **create_component(name, "ui", f"Shared {name} component").model_dump(),
            usage_count=usage[name],
        )
        for name in SHARED_UI
    ]

    return ComponentArchitecture(
        screens=groups,
        shared_components=shared,
        component_library=[lib.model_copy() for lib in COMPONENT_LIBRARY],
    )
