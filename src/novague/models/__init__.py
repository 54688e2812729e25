"""Pydantic models for the design artifacts, graphs and assembled projects."""

from __future__ import annotations

from novague.models.analysis import (
    AnalysisReasoning,
    BackendStack,
    DeploymentStack,
    FrontendStack,
    ProjectAnalysis,
    TechStack,
    UserRole,
)
from novague.models.components import (
    Component,
    ComponentArchitecture,
    ComponentDependencies,
    ComponentStyling,
    EventDefinition,
    LayoutSpec,
    LibraryChoice,
    MethodDefinition,
    PropDefinition,
    ScreenComponents,
    SharedComponent,
    StateDefinition,
)
from novague.models.data import (
    APIEndpoint,
    DatabaseTable,
    DataArchitecture,
    DataFlow,
    EndpointResponse,
    ForeignKey,
    TableField,
    TableIndex,
    TableRelationship,
    endpoint_id,
)
from novague.models.graph import (
    GraphEdge,
    GraphNode,
    Position,
    ProjectionMode,
    VisualizationGraph,
)
from novague.models.project import (
    NodeInterfaces,
    Project,
    ProjectEdge,
    ProjectNode,
    ProjectNodeData,
    TechSpec,
)
from novague.models.ux import (
    BackgroundProcess,
    FlowStep,
    PerformanceTargets,
    Screen,
    ScreenAnalysis,
    ScreenStates,
    UserFlow,
)
from novague.models.validation import Issue, Optimization, Suggestion, ValidationResult

__all__ = [
    # Analysis
    "AnalysisReasoning",
    "BackendStack",
    "DeploymentStack",
    "FrontendStack",
    "ProjectAnalysis",
    "TechStack",
    "UserRole",
    # UX
    "BackgroundProcess",
    "FlowStep",
    "PerformanceTargets",
    "Screen",
    "ScreenAnalysis",
    "ScreenStates",
    "UserFlow",
    # Data
    "APIEndpoint",
    "DatabaseTable",
    "DataArchitecture",
    "DataFlow",
    "EndpointResponse",
    "ForeignKey",
    "TableField",
    "TableIndex",
    "TableRelationship",
    "endpoint_id",
    # Components
    "Component",
    "ComponentArchitecture",
    "ComponentDependencies",
    "ComponentStyling",
    "EventDefinition",
    "LayoutSpec",
    "LibraryChoice",
    "MethodDefinition",
    "PropDefinition",
    "ScreenComponents",
    "SharedComponent",
    "StateDefinition",
    # Validation
    "Issue",
    "Optimization",
    "Suggestion",
    "ValidationResult",
    # Graph
    "GraphEdge",
    "GraphNode",
    "Position",
    "ProjectionMode",
    "VisualizationGraph",
    # Project
    "NodeInterfaces",
    "Project",
    "ProjectEdge",
    "ProjectNode",
    "ProjectNodeData",
    "TechSpec",
]
