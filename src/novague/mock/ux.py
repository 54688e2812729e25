"""Deterministic UX flow from a project analysis."""

from __future__ import annotations

from dataclasses import dataclass, field

from novague.mock.rules import KeywordRule, all_matches
from novague.models.analysis import ProjectAnalysis
from novague.models.ux import (
    BackgroundProcess,
    FlowStep,
    Screen,
    ScreenAnalysis,
    ScreenStates,
    UserFlow,
)

# (id, name, authentication, route, type)
ScreenSpec = tuple[str, str, str, str, str]

AUTH_SCREENS: tuple[ScreenSpec, ...] = (
    ("splash", "Splash Screen", "public", "/", "page"),
    ("login", "Login", "public", "/login", "page"),
    ("signup", "Sign Up", "public", "/signup", "page"),
)
AUTH_SCREEN_IDS = frozenset(spec[0] for spec in AUTH_SCREENS)

MIN_SCREENS = 4


@dataclass(frozen=True)
class ScreenGroup:
    """Screens, flow and background processes added for a feature family."""

    screens: tuple[ScreenSpec, ...]
    flow: UserFlow | None = None
    processes: tuple[BackgroundProcess, ...] = field(default_factory=tuple)


def _flow(flow_id: str, name: str, *steps: tuple[str, str, str]) -> UserFlow:
    return UserFlow(
        id=flow_id,
        name=name,
        steps=[FlowStep(screen=s, action=a, next_screen=n) for s, a, n in steps],
    )


FEED_GROUP = ScreenGroup(
    screens=(
        ("feed", "Home Feed", "protected", "/feed", "page"),
        ("post-detail", "Post Detail", "protected", "/post/:id", "page"),
        ("create-post", "Create Post", "protected", "/post/new", "modal"),
    ),
    flow=_flow(
        "post-flow",
        "Create and Browse Posts",
        ("feed", "Open Post", "post-detail"),
        ("feed", "Tap Create", "create-post"),
        ("create-post", "Publish", "feed"),
    ),
    processes=(
        BackgroundProcess(
            id="img-resize",
            name="Image Resizing & Optimization",
            type="queue",
            trigger="File Upload",
            description="Resize uploaded images for various device sizes.",
            related_screens=["create-post"],
        ),
    ),
)

COMMERCE_GROUP = ScreenGroup(
    screens=(
        ("product-list", "Product List", "public", "/products", "page"),
        ("product-detail", "Product Detail", "public", "/product/:id", "page"),
        ("cart", "Shopping Cart", "protected", "/cart", "drawer"),
        ("checkout", "Checkout", "protected", "/checkout", "page"),
    ),
    flow=_flow(
        "purchase-flow",
        "Purchase",
        ("product-list", "Select Product", "product-detail"),
        ("product-detail", "Add to Cart", "cart"),
        ("cart", "Proceed to Checkout", "checkout"),
        ("checkout", "Payment Complete", "terminate"),
    ),
    processes=(
        BackgroundProcess(
            id="payment-webhook",
            name="Payment Confirmation",
            type="webhook",
            trigger="Payment provider callback",
            description="Mark orders as paid when the payment provider confirms.",
            related_screens=["checkout"],
        ),
    ),
)

ADMIN_GROUP = ScreenGroup(
    screens=(
        ("admin-dashboard", "Admin Dashboard", "admin", "/admin", "page"),
        ("user-management", "User Management", "admin", "/admin/users", "page"),
    ),
    flow=_flow(
        "admin-flow",
        "Administration",
        ("admin-dashboard", "Manage Users", "user-management"),
    ),
    processes=(
        BackgroundProcess(
            id="daily-report",
            name="Daily Usage Report",
            type="cron",
            trigger="Every day at 00:00",
            description="Aggregate usage metrics for the admin dashboard.",
            related_screens=["admin-dashboard"],
        ),
    ),
)

FALLBACK_GROUP = ScreenGroup(
    screens=(
        ("dashboard", "Dashboard", "protected", "/dashboard", "page"),
        ("settings", "Settings", "protected", "/settings", "page"),
    ),
    flow=_flow("settings-flow", "Account Settings", ("dashboard", "Open Settings", "settings")),
)

# Every matching group contributes, in table order
GROUP_RULES: tuple[KeywordRule, ...] = (
    KeywordRule(("feed", "post"), FEED_GROUP),
    KeywordRule(("cart", "product"), COMMERCE_GROUP),
    KeywordRule(("admin", "dashboard"), ADMIN_GROUP),
)


def create_screen(
    screen_id: str, name: str, authentication: str, route: str, screen_type: str = "page"
) -> Screen:
    """Build a screen with the standard states and performance targets."""
    return Screen(
        id=screen_id,
        name=name,
        type=screen_type,
        route=route,
        description=f"Main interface for {name}",
        user_story=f"As a user, I want to access {name} so that I can perform related tasks.",
        acceptance_criteria=[
            f"{name} should load within 1.5s",
            "Should display error state if data fetch fails",
        ],
        states=ScreenStates(
            loading="Skeleton loader",
            empty="No data illustration",
            error="Retry button with error message",
            success="Full content display",
        ),
        authentication=authentication,
        permissions=["admin_access"] if authentication == "admin" else [],
    )


def _auth_flow(landing: str) -> UserFlow:
    flow = _flow(
        "auth-flow",
        "User Authentication",
        ("splash", "Auto Redirect", "login"),
        ("login", "Login Success", landing),
        ("login", "Click Signup", "signup"),
        ("signup", "Signup Success", landing),
    )
    flow.alternative_flows = [
        [
            FlowStep(
                screen="login",
                action="Submit Invalid Credentials",
                condition="credentials rejected",
                next_screen="login",
            )
        ]
    ]
    return flow


def mock_ux(analysis: ProjectAnalysis) -> ScreenAnalysis:
    """Synthesize screens, flows and background processes from core features.

    Args:
        analysis: Stage 1 artifact

    Returns:
        ScreenAnalysis with the auth triad, keyword-selected screen groups and
        a dashboard/settings pair when too few screens were produced
    """
    groups: list[ScreenGroup] = all_matches(GROUP_RULES, analysis.features_text())

    screens = [create_screen(s, n, a, r, t) for s, n, a, r, t in AUTH_SCREENS]
    for group in groups:
        screens.extend(create_screen(s, n, a, r, t) for s, n, a, r, t in group.screens)

    if len(screens) < MIN_SCREENS:
        groups.append(FALLBACK_GROUP)
        screens.extend(
            create_screen(s, n, a, r, t) for s, n, a, r, t in FALLBACK_GROUP.screens
        )

    landing = next(s.id for s in screens if s.id not in AUTH_SCREEN_IDS)

    flows: list[UserFlow] = []
    if analysis.tech_stack.backend.authentication:
        flows.append(_auth_flow(landing))
    flows.extend(group.flow.model_copy(deep=True) for group in groups if group.flow)

    processes = [
        process.model_copy(deep=True) for group in groups for process in group.processes
    ]

    return ScreenAnalysis(screens=screens, user_flows=flows, background_processes=processes)
