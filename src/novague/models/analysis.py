"""Project analysis artifact (stage 1).

The analysis captures project identity, the recommended technology stack,
core features, user roles and a complexity estimate derived from the idea.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from novague.models.base import ArtifactModel

ProjectType = Literal["web", "mobile", "desktop", "api", "hybrid"]
BackendType = Literal["serverless", "traditional", "microservices"]
Complexity = Literal["simple", "medium", "complex"]


class FrontendStack(ArtifactModel):
    """Frontend technology choices."""

    framework: str = Field(..., description="UI framework")
    language: str = Field(..., description="Implementation language")
    styling: str = Field(default="", description="Styling solution")
    state_management: str = Field(default="", description="Client state library")


class BackendStack(ArtifactModel):
    """Backend technology choices.

    Attributes:
        type: Backend architecture style
        platform: Hosting/backend platform
        database: Primary database
        authentication: Authentication provider, empty if none
    """

    type: BackendType = Field(..., description="Backend architecture style")
    platform: str = Field(..., description="Backend platform")
    database: str = Field(..., description="Primary database")
    authentication: str = Field(default="", description="Authentication provider")


class DeploymentStack(ArtifactModel):
    """Deployment targets."""

    frontend: str = Field(..., description="Frontend hosting")
    backend: str = Field(..., description="Backend hosting")
    cdn: str = Field(default="", description="CDN provider")


class TechStack(ArtifactModel):
    """Recommended technology stack."""

    frontend: FrontendStack
    backend: BackendStack
    deployment: DeploymentStack

    def summary(self) -> list[str]:
        """Flatten the stack into a list of named technologies."""
        items = [
            self.frontend.framework,
            self.frontend.language,
            self.frontend.styling,
            self.frontend.state_management,
            self.backend.platform,
            self.backend.database,
            self.backend.authentication,
        ]
        seen: list[str] = []
        for item in items:
            if item and item not in seen:
                seen.append(item)
        return seen


class UserRole(ArtifactModel):
    """A user role and its permissions."""

    name: str = Field(..., description="Role name")
    permissions: list[str] = Field(default_factory=list, description="Granted permissions")
    description: str = Field(default="", description="Role description")


class AnalysisReasoning(ArtifactModel):
    """Rationale behind the analysis decisions."""

    tech_stack_reason: str = Field(default="", description="Why this stack")
    architecture_reason: str = Field(default="", description="Why this architecture")
    complexity_reason: str = Field(default="", description="Why this complexity estimate")


class ProjectAnalysis(ArtifactModel):
    """Stage 1 artifact: analysis of the submitted idea.

    Attributes:
        project_name: Generated project name
        summary: One-paragraph project summary
        project_type: Kind of application
        tech_stack: Recommended technology stack
        core_features: Flat list of core features (never empty)
        user_roles: Roles that interact with the system
        business_rules: Domain rules the design must enforce
        estimated_complexity: Complexity estimate
        development_time: Rough development time estimate
        team_size: Suggested team size
        reasoning: Rationale for the decisions above
    """

    project_name: str = Field(..., min_length=1, description="Project name")
    summary: str = Field(..., description="Project summary")
    project_type: ProjectType = Field(default="web", description="Application kind")
    tech_stack: TechStack
    core_features: list[str] = Field(..., min_length=1, description="Core features")
    user_roles: list[UserRole] = Field(default_factory=list, description="User roles")
    business_rules: list[str] = Field(default_factory=list, description="Business rules")
    estimated_complexity: Complexity = Field(default="simple")
    development_time: str = Field(default="", description="Development time estimate")
    team_size: str = Field(default="", description="Suggested team size")
    reasoning: AnalysisReasoning = Field(default_factory=AnalysisReasoning)

    def features_text(self) -> str:
        """Lower-cased concatenation of all core features for keyword matching."""
        return " ".join(self.core_features).lower()
