"""Assembled project record handed to persistence and prompt export."""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from novague.models.base import ArtifactModel
from novague.models.components import EventDefinition, PropDefinition, StateDefinition
from novague.models.data import APIEndpoint, DatabaseTable
from novague.models.graph import Position

NodeType = Literal["page", "component", "api", "database"]
EdgeType = Literal["dependency", "dataFlow", "navigation"]


class TechSpec(ArtifactModel):
    """Technology context of a node."""

    framework: str = ""
    styling: str = ""
    state_management: str = ""


class NodeInterfaces(ArtifactModel):
    """Props, state and events of a component node."""

    props: list[PropDefinition] = Field(default_factory=list)
    state: list[StateDefinition] = Field(default_factory=list)
    events: list[EventDefinition] = Field(default_factory=list)


class ProjectNodeData(ArtifactModel):
    """Payload of a project node.

    Attributes:
        label: Display name
        type: Node kind
        requirements: Functional requirements to implement
        tech_spec: Technology context
        file_path: Target source path
        interfaces: Props/state/events (component nodes)
        endpoints: Endpoints the node uses (component nodes)
        table_schema: Table definition (database nodes)
        dependencies: Ids of nodes this node depends on
    """

    label: str
    type: NodeType
    description: str = ""
    requirements: list[str] = Field(default_factory=list)
    tech_spec: TechSpec = Field(default_factory=TechSpec)
    file_path: str = ""
    interfaces: NodeInterfaces | None = None
    endpoints: list[APIEndpoint] = Field(default_factory=list)
    table_schema: DatabaseTable | None = None
    dependencies: list[str] = Field(default_factory=list)


class ProjectNode(ArtifactModel):
    """A node of the assembled project."""

    id: str
    position: Position
    data: ProjectNodeData


class ProjectEdge(ArtifactModel):
    """An edge of the assembled project."""

    id: str
    source: str
    target: str
    label: str | None = None
    type: EdgeType


class Project(ArtifactModel):
    """Flattened design produced when the pipeline completes.

    Attributes:
        id: Project identifier
        name: Project name
        description: Project summary
        tech_stack: Named technologies used across the project
        nodes: Page, database and component nodes
        edges: Navigation and dependency edges
        created_at: Unix timestamp in milliseconds
        author: Who produced the design
    """

    id: str
    name: str
    description: str = ""
    tech_stack: list[str] = Field(default_factory=list)
    nodes: list[ProjectNode] = Field(default_factory=list)
    edges: list[ProjectEdge] = Field(default_factory=list)
    created_at: int | None = None
    author: str | None = None

    def get_node(self, node_id: str) -> ProjectNode | None:
        """Return the node with the given id, if any."""
        return next((n for n in self.nodes if n.id == node_id), None)
