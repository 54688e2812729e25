"""Graph projector: five views of the design artifacts.

Each projection is a pure function of the artifacts it reads, so the same
inputs always produce the same nodes, edges and positions.

Example usage:
    >>> graph = project_graph(ProjectionMode.user_flow, analysis, ux, data, components)
    >>> [node.id for node in graph.nodes]
    ['splash', 'login', 'signup', 'feed', ...]
"""

from __future__ import annotations

from collections.abc import Callable

import structlog

from novague.linking import dependency_pairs
from novague.models.analysis import ProjectAnalysis
from novague.models.components import ComponentArchitecture
from novague.models.data import DataArchitecture
from novague.models.graph import (
    GraphEdge,
    GraphNode,
    Position,
    ProjectionMode,
    VisualizationGraph,
)
from novague.models.ux import ScreenAnalysis

logger = structlog.get_logger(__name__)

TERMINATE = "terminate"


def architecture_view(analysis: ProjectAnalysis) -> VisualizationGraph:
    """Client, backend and database tiers, plus the auth service if any."""
    stack = analysis.tech_stack
    nodes = [
        GraphNode(
            id="client",
            label=f"{stack.frontend.framework} Client",
            position=Position(x=250, y=50),
            kind="client",
        ),
        GraphNode(
            id="backend",
            label=f"{stack.backend.platform} API",
            position=Position(x=250, y=200),
            kind="backend",
        ),
        GraphNode(
            id="database",
            label=f"{stack.backend.database} DB",
            position=Position(x=250, y=350),
            kind="database",
        ),
    ]
    edges = [
        GraphEdge(id="c-b", source="client", target="backend", label="REST/GraphQL", animated=True),
        GraphEdge(id="b-d", source="backend", target="database", label="ORM", animated=True),
    ]

    if stack.backend.authentication:
        nodes.append(
            GraphNode(
                id="auth",
                label=stack.backend.authentication,
                position=Position(x=50, y=200),
                kind="auth",
            )
        )
        edges.append(GraphEdge(id="c-a", source="client", target="auth", dashed=True))
        edges.append(GraphEdge(id="b-a", source="backend", target="auth", dashed=True))

    return VisualizationGraph(mode=ProjectionMode.architecture, nodes=nodes, edges=edges)


def user_flow_view(ux: ScreenAnalysis) -> VisualizationGraph:
    """Screens on a three-column grid with one edge per main-flow step."""
    nodes = [
        GraphNode(
            id=screen.id,
            label=screen.name,
            position=Position(x=(idx % 3) * 200 + 50, y=(idx // 3) * 150 + 50),
            kind="screen",
            data={"type": screen.type, "route": screen.route},
        )
        for idx, screen in enumerate(ux.screens)
    ]

    edges: list[GraphEdge] = []
    for flow_idx, flow in enumerate(ux.user_flows):
        for step_idx, step in enumerate(flow.steps):
            if not step.next_screen or step.next_screen == TERMINATE:
                continue
            source = ux.resolve_screen(step.screen)
            target = ux.resolve_screen(step.next_screen)
            if source is None or target is None:
                continue
            edges.append(
                GraphEdge(
                    id=f"flow-{flow_idx}-{step_idx}",
                    source=source.id,
                    target=target.id,
                    label=step.action,
                    animated=True,
                )
            )

    return VisualizationGraph(mode=ProjectionMode.user_flow, nodes=nodes, edges=edges)


def component_tree_view(components: ComponentArchitecture) -> VisualizationGraph:
    """Page, layout and feature components per screen, 400 units apart."""
    nodes: list[GraphNode] = []
    edges: list[GraphEdge] = []

    page_x = 0
    for group in components.screens:
        page_id = f"screen-{group.screen_id}"
        layout_id = f"layout-{group.screen_id}"
        nodes.append(
            GraphNode(
                id=page_id,
                label=f"{group.screen_id} Page",
                position=Position(x=page_x, y=0),
                kind="page",
            )
        )
        nodes.append(
            GraphNode(
                id=layout_id,
                label=group.layout.name,
                position=Position(x=page_x, y=100),
                kind="layout",
            )
        )
        edges.append(GraphEdge(id=f"s-l-{group.screen_id}", source=page_id, target=layout_id))

        for idx, component in enumerate(group.feature_components):
            component_node_id = f"comp-{component.id}"
            nodes.append(
                GraphNode(
                    id=component_node_id,
                    label=component.name,
                    position=Position(x=page_x + idx * 150 - 50, y=250),
                    kind="feature",
                )
            )
            edges.append(
                GraphEdge(id=f"l-c-{component.id}", source=layout_id, target=component_node_id)
            )

        page_x += 400

    return VisualizationGraph(mode=ProjectionMode.component_tree, nodes=nodes, edges=edges)


def data_flow_view(data: DataArchitecture, components: ComponentArchitecture) -> VisualizationGraph:
    """Components calling endpoints, endpoints touching tables."""
    nodes: list[GraphNode] = []
    edges: list[GraphEdge] = []

    # Tables, bottom row
    for idx, table in enumerate(data.tables):
        nodes.append(
            GraphNode(
                id=f"tbl-{table.name}",
                label=f"Table: {table.name}",
                position=Position(x=idx * 250, y=400),
                kind="table",
            )
        )

    # Endpoints, middle row; ids are unique per DataArchitecture
    for idx, endpoint in enumerate(data.endpoints):
        endpoint_node_id = f"api-{endpoint.id}"
        nodes.append(
            GraphNode(
                id=endpoint_node_id,
                label=endpoint.signature,
                position=Position(x=idx * 220, y=250),
                kind="api",
            )
        )
        for table_name in endpoint.related_tables:
            if data.get_table(table_name) is None:
                continue
            edges.append(
                GraphEdge(
                    id=f"api-tbl-{endpoint.id}-{table_name}",
                    source=endpoint_node_id,
                    target=f"tbl-{table_name}",
                    dashed=True,
                    animated=True,
                )
            )

    # Feature components with API dependencies, top row
    component_x = 0
    for group in components.screens:
        for component in group.feature_components:
            if not component.dependencies.apis:
                continue
            component_node_id = f"df-comp-{component.id}"
            nodes.append(
                GraphNode(
                    id=component_node_id,
                    label=component.name,
                    position=Position(x=component_x, y=50),
                    kind="component",
                )
            )
            component_x += 200

            for endpoint_id in component.endpoint_ids:
                if data.get_endpoint(endpoint_id) is None:
                    continue
                edges.append(
                    GraphEdge(
                        id=f"comp-api-{component.id}-{endpoint_id}",
                        source=component_node_id,
                        target=f"api-{endpoint_id}",
                    )
                )

    return VisualizationGraph(mode=ProjectionMode.data_flow, nodes=nodes, edges=edges)


def dependency_graph_view(components: ComponentArchitecture) -> VisualizationGraph:
    """Every component keyed by id, with resolved dependency edges."""
    nodes = [
        GraphNode(
            id=component.id,
            label=component.name,
            position=Position(x=(idx % 5) * 200, y=(idx // 5) * 150),
            kind=component.type,
            data={"screen_id": screen_id},
        )
        for idx, (screen_id, component) in enumerate(components.iter_components())
    ]
    edges = [
        GraphEdge(
            id=f"dep-{dependent.id}-{dependency.id}",
            source=dependent.id,
            target=dependency.id,
        )
        for dependent, dependency in dependency_pairs(components)
    ]
    return VisualizationGraph(mode=ProjectionMode.dependency_graph, nodes=nodes, edges=edges)


def project_graph(
    mode: ProjectionMode | str,
    analysis: ProjectAnalysis,
    ux: ScreenAnalysis,
    data: DataArchitecture,
    components: ComponentArchitecture,
) -> VisualizationGraph:
    """Project the artifacts into the graph for ``mode``.

    Args:
        mode: Projection mode or its string value (e.g. ``"user-flow"``)
        analysis: Stage 1 artifact
        ux: Stage 2 artifact
        data: Stage 3 artifact
        components: Stage 4 artifact

    Returns:
        Nodes and edges for the requested view

    Raises:
        ValueError: If ``mode`` is not a projection mode
    """
    mode = ProjectionMode(mode)
    views: dict[ProjectionMode, Callable[[], VisualizationGraph]] = {
        ProjectionMode.architecture: lambda: architecture_view(analysis),
        ProjectionMode.user_flow: lambda: user_flow_view(ux),
        ProjectionMode.component_tree: lambda: component_tree_view(components),
        ProjectionMode.data_flow: lambda: data_flow_view(data, components),
        ProjectionMode.dependency_graph: lambda: dependency_graph_view(components),
    }
    graph = views[mode]()
    logger.debug(
        "graph_projected",
        mode=mode.value,
        node_count=len(graph.nodes),
        edge_count=len(graph.edges),
    )
    return graph
