"""Project assembly: flatten the design artifacts into a Project record.

The assembled project has one ``page`` node per screen, one ``database`` node
per table and one ``component`` node per component (feature, UI and shared).
Edges are navigation edges from the main user flows, membership edges from
each screen component to its screen, and dependency edges between resolved
components.
"""

from __future__ import annotations

import time
import uuid

import structlog

from novague.linking import dependency_pairs
from novague.models.analysis import ProjectAnalysis
from novague.models.components import Component, ComponentArchitecture
from novague.models.data import DataArchitecture
from novague.models.graph import Position
from novague.models.project import (
    NodeInterfaces,
    Project,
    ProjectEdge,
    ProjectNode,
    ProjectNodeData,
    TechSpec,
)
from novague.models.ux import ScreenAnalysis

logger = structlog.get_logger(__name__)

PAGE_ROW_Y = 100
COMPONENT_ROW_Y = 350
TABLE_ROW_Y = 600


def table_node_id(table_name: str) -> str:
    """Node id of a database table."""
    return f"db-{table_name}"


def _page_nodes(analysis: ProjectAnalysis, ux: ScreenAnalysis) -> list[ProjectNode]:
    frontend = analysis.tech_stack.frontend
    tech = TechSpec(
        framework=frontend.framework,
        styling=frontend.styling,
        state_management=frontend.state_management,
    )
    return [
        ProjectNode(
            id=screen.id,
            position=Position(x=100 + idx * 250, y=PAGE_ROW_Y),
            data=ProjectNodeData(
                label=screen.name,
                type="page",
                description=screen.description,
                requirements=list(screen.acceptance_criteria),
                tech_spec=tech,
                file_path=f"/src/pages/{screen.name}.tsx",
            ),
        )
        for idx, screen in enumerate(ux.screens)
    ]


def _table_nodes(data: DataArchitecture) -> list[ProjectNode]:
    return [
        ProjectNode(
            id=table_node_id(table.name),
            position=Position(x=100 + idx * 250, y=TABLE_ROW_Y),
            data=ProjectNodeData(
                label=table.name,
                type="database",
                description=table.description,
                table_schema=table,
                file_path=f"Database Table: {table.name}",
            ),
        )
        for idx, table in enumerate(data.tables)
    ]


def _component_node(
    component: Component,
    idx: int,
    analysis: ProjectAnalysis,
    data: DataArchitecture,
    dependencies: list[str],
) -> ProjectNode:
    frontend = analysis.tech_stack.frontend
    endpoints = [
        endpoint
        for endpoint_id in component.endpoint_ids
        if (endpoint := data.get_endpoint(endpoint_id)) is not None
    ]
    requirements = [component.responsibility] if component.responsibility else []
    return ProjectNode(
        id=component.id,
        position=Position(x=100 + idx * 200, y=COMPONENT_ROW_Y),
        data=ProjectNodeData(
            label=component.name,
            type="component",
            description=component.description,
            requirements=requirements + list(component.test_scenarios),
            tech_spec=TechSpec(
                framework=frontend.framework,
                styling=component.styling.framework,
                state_management=frontend.state_management,
            ),
            file_path=component.file_path or f"/src/components/{component.name}.tsx",
            interfaces=NodeInterfaces(
                props=list(component.props),
                state=list(component.state),
                events=list(component.events),
            ),
            endpoints=endpoints,
            dependencies=dependencies,
        ),
    )


def assemble_project(
    analysis: ProjectAnalysis,
    ux: ScreenAnalysis,
    data: DataArchitecture,
    components: ComponentArchitecture,
    project_id: str | None = None,
    author: str | None = "AI",
) -> Project:
    """Assemble the design artifacts into a Project.

    Args:
        analysis: Stage 1 artifact
        ux: Stage 2 artifact
        data: Stage 3 artifact
        components: Stage 4 artifact
        project_id: Project id; a random UUID when omitted
        author: Recorded author

    Returns:
        Project whose nodes are screens, tables and components
    """
    # Component dependency references resolved to ids
    pairs = dependency_pairs(components)
    resolved: dict[str, list[str]] = {}
    for dependent, dependency in pairs:
        resolved.setdefault(dependent.id, []).append(dependency.id)

    nodes = _page_nodes(analysis, ux) + _table_nodes(data)
    edges: list[ProjectEdge] = []

    for idx, (_, component) in enumerate(components.iter_components()):
        nodes.append(
            _component_node(component, idx, analysis, data, resolved.get(component.id, []))
        )

    # Navigation: one edge per main-flow step between known screens
    for flow_idx, flow in enumerate(ux.user_flows):
        for step_idx, step in enumerate(flow.steps):
            if step.next_screen == "terminate":
                continue
            source = ux.resolve_screen(step.screen)
            target = ux.resolve_screen(step.next_screen)
            if source is None or target is None:
                continue
            edges.append(
                ProjectEdge(
                    id=f"nav-{flow_idx}-{step_idx}",
                    source=source.id,
                    target=target.id,
                    label=step.action,
                    type="navigation",
                )
            )

    # Membership: component -> owning screen; shared components have none
    for screen_id, component in components.iter_components():
        if screen_id is None or ux.get_screen(screen_id) is None:
            continue
        edges.append(
            ProjectEdge(
                id=f"e-{component.id}-{screen_id}",
                source=component.id,
                target=screen_id,
                type="dependency",
            )
        )

    # Component -> component
    for dependent, dependency in pairs:
        edges.append(
            ProjectEdge(
                id=f"dep-{dependent.id}-{dependency.id}",
                source=dependent.id,
                target=dependency.id,
                type="dependency",
            )
        )

    project = Project(
        id=project_id or str(uuid.uuid4()),
        name=analysis.project_name,
        description=analysis.summary,
        tech_stack=analysis.tech_stack.summary(),
        nodes=nodes,
        edges=edges,
        created_at=int(time.time() * 1000),
        author=author,
    )
    logger.info(
        "project_assembled",
        project_id=project.id,
        node_count=len(nodes),
        edge_count=len(edges),
    )
    return project
