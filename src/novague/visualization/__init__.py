"""Graph projections of the design artifacts."""

from __future__ import annotations

from novague.visualization.projector import (
    architecture_view,
    component_tree_view,
    data_flow_view,
    dependency_graph_view,
    project_graph,
    user_flow_view,
)

__all__ = [
    "architecture_view",
    "component_tree_view",
    "data_flow_view",
    "dependency_graph_view",
    "project_graph",
    "user_flow_view",
]
