"""Generic node/edge graph produced by the graph projector."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import Field

from novague.models.base import ArtifactModel


class ProjectionMode(str, Enum):
    """The five ways of viewing the design artifacts as a graph."""

    architecture = "architecture"
    user_flow = "user-flow"
    component_tree = "component-tree"
    data_flow = "data-flow"
    dependency_graph = "dependency-graph"


class Position(ArtifactModel):
    """Node coordinates."""

    x: float
    y: float


class GraphNode(ArtifactModel):
    """A node of a visualization graph.

    Attributes:
        id: Node identifier, unique within the graph
        label: Display label
        position: Layout coordinates
        kind: Style hint (e.g. "client", "page", "layout", "table")
        data: Extra display data
    """

    id: str
    label: str
    position: Position
    kind: str = "default"
    data: dict[str, Any] = Field(default_factory=dict)


class GraphEdge(ArtifactModel):
    """A directed edge of a visualization graph."""

    id: str
    source: str
    target: str
    label: str | None = None
    dashed: bool = False
    animated: bool = False


class VisualizationGraph(ArtifactModel):
    """Nodes and edges for one projection mode."""

    mode: ProjectionMode
    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)

    def node_ids(self) -> set[str]:
        """Ids of all nodes."""
        return {node.id for node in self.nodes}
