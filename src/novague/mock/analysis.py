"""Deterministic project analysis from idea text."""

from __future__ import annotations

import re
from dataclasses import dataclass

from novague.mock.rules import KeywordRule, first_match
from novague.models.analysis import (
    AnalysisReasoning,
    BackendStack,
    DeploymentStack,
    FrontendStack,
    ProjectAnalysis,
    TechStack,
    UserRole,
)

BASE_FEATURES = (
    "User Authentication (Login/Signup)",
    "Responsive UI/UX Design",
)

DEFAULT_DATABASE = "PostgreSQL"
DEFAULT_AUTH = "Supabase Auth"

NAME_STOPWORDS = frozenset(
    {
        "a", "an", "the", "app", "application", "and", "for", "with", "that",
        "this", "my", "our", "want", "build", "create", "make", "simple", "new",
        "like", "some", "where", "which",
    }
)


@dataclass(frozen=True)
class FeatureFamily:
    """Features and backend choices contributed by a keyword family."""

    name: str
    features: tuple[str, ...]
    database: str = DEFAULT_DATABASE
    authentication: str = DEFAULT_AUTH


SOCIAL = FeatureFamily(
    name="social",
    features=(
        "User Feeds & Timeline",
        "Photo & Video Posts",
        "Like & Comment System",
        "Real-time Notifications",
    ),
    database="PostgreSQL + Realtime",
    authentication="Supabase Auth (Social Providers)",
)
COMMERCE = FeatureFamily(
    name="commerce",
    features=(
        "Product Catalog & Search",
        "Shopping Cart & Checkout",
        "Order History Management",
    ),
)
BLOG = FeatureFamily(
    name="blog",
    features=("CRUD Posts", "Markdown Editor", "Comment System"),
)
DASHBOARD = FeatureFamily(
    name="dashboard",
    features=("Dashboard & Analytics", "File Upload & Management"),
)

# First match wins
FAMILY_RULES: tuple[KeywordRule, ...] = (
    KeywordRule(("sns", "social", "instagram", "photo", "feed", "community"), SOCIAL),
    KeywordRule(("shop", "commerce", "ecommerce", "store", "marketplace"), COMMERCE),
    KeywordRule(("blog", "board", "forum"), BLOG),
)

SUMMARY_RULES: tuple[KeywordRule, ...] = (
    KeywordRule(
        ("app", "mobile", "ios", "android"),
        "A mobile-first responsive web application designed from the submitted idea.",
    ),
)
DEFAULT_SUMMARY = "A web application designed from the submitted idea."


def project_name_from_idea(idea: str) -> str:
    """Build ``My<Word>App`` from the first significant word of the idea.

    Words shorter than three letters and common filler words are skipped;
    hyphenated words are joined with each part capitalised.

    Example:
        >>> project_name_from_idea("an Instagram-like photo sharing app")
        'MyInstagramLikeApp'
    """
    for raw in idea.split():
        parts = [re.sub(r"[^0-9a-zA-Z]", "", p) for p in raw.split("-")]
        parts = [p for p in parts if p]
        word = "".join(parts)
        if len(word) < 3 or word.lower() in NAME_STOPWORDS:
            continue
        return "My" + "".join(p[0].upper() + p[1:] for p in parts) + "App"
    return "MyNewProject"


def mock_analysis(idea: str) -> ProjectAnalysis:
    """Synthesize a schema-valid analysis from the idea text alone.

    Args:
        idea: Free-form product idea

    Returns:
        ProjectAnalysis with a fixed baseline stack and keyword-selected
        core features
    """
    family: FeatureFamily = first_match(FAMILY_RULES, idea, default=DASHBOARD)
    summary: str = first_match(SUMMARY_RULES, idea, default=DEFAULT_SUMMARY)
    complexity = "medium" if len(idea) > 50 else "simple"

    return ProjectAnalysis(
        project_name=project_name_from_idea(idea),
        summary=summary,
        project_type="web",
        tech_stack=TechStack(
            frontend=FrontendStack(
                framework="Next.js 14",
                language="TypeScript",
                styling="Tailwind CSS",
                state_management="Zustand",
            ),
            backend=BackendStack(
                type="serverless",
                platform="Supabase",
                database=family.database,
                authentication=family.authentication,
            ),
            deployment=DeploymentStack(
                frontend="Vercel",
                backend="Supabase Cloud",
                cdn="Vercel Edge Network",
            ),
        ),
        core_features=[*BASE_FEATURES, *family.features],
        user_roles=[
            UserRole(
                name="Admin",
                permissions=["manage_users", "manage_content"],
                description="System administrator with full access",
            ),
            UserRole(
                name="User",
                permissions=["create_content", "read_content"],
                description="Standard authenticated user",
            ),
        ],
        business_rules=[
            "Users must be logged in to create content.",
            "Content must follow community guidelines.",
        ],
        estimated_complexity=complexity,
        development_time="2-4 weeks",
        team_size="1-2 developers",
        reasoning=AnalysisReasoning(
            tech_stack_reason=(
                "Next.js and Supabase give the fastest time-to-market with "
                "built-in scalability and security."
            ),
            architecture_reason=(
                "A serverless backend keeps operational overhead low so work "
                "can focus on product features."
            ),
            complexity_reason=(
                f"The {family.name} feature set needs standard CRUD operations "
                "with some realtime capability."
            ),
        ),
    )
