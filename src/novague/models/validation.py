"""Integration validation artifact (stage 5)."""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from novague.models.base import ArtifactModel

IssueType = Literal[
    "missing_dependency",
    "circular_dependency",
    "type_mismatch",
    "security_gap",
    "performance_issue",
    "accessibility",
]
Severity = Literal["critical", "high", "medium", "low"]
SuggestionCategory = Literal["architecture", "performance", "security", "maintainability"]
Level = Literal["high", "medium", "low"]


class Issue(ArtifactModel):
    """A consistency problem found across artifacts.

    Attributes:
        type: Issue category
        severity: How serious the issue is
        location: Where the issue was found (screen/component)
        description: What is wrong
        solution: Suggested fix
        auto_fix_available: Whether the fix can be applied mechanically
    """

    type: IssueType
    severity: Severity
    location: str
    description: str
    solution: str = ""
    auto_fix_available: bool = False


class Suggestion(ArtifactModel):
    """Advisory, non-blocking improvement."""

    category: SuggestionCategory
    title: str
    description: str
    impact: Level = "medium"
    effort: Level = "medium"


class Optimization(ArtifactModel):
    """A concrete optimization opportunity."""

    target: str
    description: str
    estimated_gain: str = ""


class ValidationResult(ArtifactModel):
    """Stage 5 artifact.

    ``critical_issues`` holds issues of severity ``critical``; every other
    issue lives in ``warnings``.
    """

    is_valid: bool
    score: int = Field(..., ge=0, le=100)
    critical_issues: list[Issue] = Field(default_factory=list)
    warnings: list[Issue] = Field(default_factory=list)
    suggestions: list[Suggestion] = Field(default_factory=list)
    optimizations: list[Optimization] = Field(default_factory=list)

    @property
    def issues(self) -> list[Issue]:
        """All issues, critical first."""
        return [*self.critical_issues, *self.warnings]
