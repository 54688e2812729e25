"""Unit tests for the graph projector.

Tests cover:
- All five projection modes
- Determinism of nodes, edges and positions
- Flow step resolution and terminate handling
- Endpoint and table links in the data-flow view
"""

from __future__ import annotations

import pytest

from novague.linking import dependency_pairs
from novague.models.graph import ProjectionMode
from novague.models.ux import FlowStep, UserFlow
from novague.visualization.projector import (
    architecture_view,
    component_tree_view,
    data_flow_view,
    dependency_graph_view,
    project_graph,
    user_flow_view,
)


def _project(design, mode):
    return project_graph(mode, design.analysis, design.ux, design.data, design.components)


class TestProjectGraph:
    """Test the mode dispatcher."""

    @pytest.mark.parametrize("mode", list(ProjectionMode))
    def test_deterministic(self, photo_design, mode: ProjectionMode) -> None:
        """Test that projecting twice gives identical graphs."""
        assert _project(photo_design, mode) == _project(photo_design, mode)

    @pytest.mark.parametrize("mode", list(ProjectionMode))
    def test_edges_reference_nodes(self, shop_design, mode: ProjectionMode) -> None:
        """Test that every edge connects two nodes of the same graph."""
        graph = _project(shop_design, mode)
        node_ids = graph.node_ids()
        assert len(node_ids) == len(graph.nodes)
        for edge in graph.edges:
            assert edge.source in node_ids
            assert edge.target in node_ids

    def test_mode_by_value(self, photo_design) -> None:
        """Test that string values select modes."""
        assert _project(photo_design, "component-tree").mode == ProjectionMode.component_tree

    def test_unknown_mode(self, photo_design) -> None:
        """Test that unknown modes raise ValueError."""
        with pytest.raises(ValueError):
            _project(photo_design, "sitemap")


class TestArchitectureView:
    """Test the architecture view."""

    def test_with_auth_service(self, photo_design) -> None:
        """Test the three tiers plus the auth node."""
        graph = architecture_view(photo_design.analysis)
        stack = photo_design.analysis.tech_stack

        assert [n.id for n in graph.nodes] == ["client", "backend", "database", "auth"]
        assert graph.nodes[0].label == f"{stack.frontend.framework} Client"
        assert graph.nodes[2].label == f"{stack.backend.database} DB"
        assert graph.nodes[3].label == stack.backend.authentication
        assert [e.id for e in graph.edges] == ["c-b", "b-d", "c-a", "b-a"]
        assert graph.edges[0].label == "REST/GraphQL"
        assert graph.edges[2].dashed is True

    def test_without_auth_service(self, photo_design) -> None:
        """Test that no auth node is drawn without an auth provider."""
        photo_design.analysis.tech_stack.backend.authentication = ""
        graph = architecture_view(photo_design.analysis)
        assert len(graph.nodes) == 3
        assert len(graph.edges) == 2


class TestUserFlowView:
    """Test the user-flow view."""

    def test_grid_positions(self, photo_design) -> None:
        """Test the three-column grid."""
        graph = user_flow_view(photo_design.ux)
        positions = [(n.position.x, n.position.y) for n in graph.nodes]
        assert positions[:4] == [(50, 50), (250, 50), (450, 50), (50, 200)]

    def test_one_edge_per_step(self, photo_design) -> None:
        """Test that every resolvable step becomes an animated edge."""
        graph = user_flow_view(photo_design.ux)
        steps = sum(len(flow.steps) for flow in photo_design.ux.user_flows)

        assert len(graph.edges) == steps
        assert all(edge.animated for edge in graph.edges)
        first = graph.edges[0]
        assert (first.id, first.source, first.target) == ("flow-0-0", "splash", "login")

    def test_terminate_is_skipped(self, shop_design) -> None:
        """Test that the end of the purchase flow has no edge."""
        graph = user_flow_view(shop_design.ux)
        assert "terminate" not in {edge.target for edge in graph.edges}
        assert not any(edge.label == "Payment Complete" for edge in graph.edges)

    def test_name_and_unknown_references(self, photo_design) -> None:
        """Test that names resolve and unknown screens are skipped."""
        photo_design.ux.user_flows = [
            UserFlow(
                id="mixed",
                name="Mixed",
                steps=[
                    FlowStep(screen="Home Feed", action="Open", next_screen="post-detail"),
                    FlowStep(screen="feed", action="Explore", next_screen="explore"),
                ],
            )
        ]

        graph = user_flow_view(photo_design.ux)

        assert [(e.source, e.target) for e in graph.edges] == [("feed", "post-detail")]


class TestComponentTreeView:
    """Test the component-tree view."""

    def test_structure(self, photo_design) -> None:
        """Test page, layout and feature nodes per screen."""
        components = photo_design.components
        graph = component_tree_view(components)
        features = sum(len(g.feature_components) for g in components.screens)

        assert len(graph.nodes) == 2 * len(components.screens) + features
        assert len(graph.edges) == len(components.screens) + features

    def test_positions(self, photo_design) -> None:
        """Test that screens are spaced 400 apart and features fan out."""
        graph = component_tree_view(photo_design.components)
        nodes = {node.id: node for node in graph.nodes}

        feed_index = [g.screen_id for g in photo_design.components.screens].index("feed")
        page_x = feed_index * 400
        assert nodes["screen-feed"].position.x == page_x
        assert nodes["layout-feed"].position.y == 100
        assert nodes["layout-feed"].label == "DashboardLayout"
        assert nodes["comp-feed.PostList"].position.x == page_x - 50
        assert nodes["comp-feed.PostCard"].position.x == page_x + 100
        assert nodes["comp-feed.PostList"].position.y == 250

    def test_edges(self, photo_design) -> None:
        """Test page-to-layout and layout-to-feature edges."""
        graph = component_tree_view(photo_design.components)
        edges = {edge.id: edge for edge in graph.edges}
        assert (edges["s-l-feed"].source, edges["s-l-feed"].target) == (
            "screen-feed",
            "layout-feed",
        )
        assert edges["l-c-feed.PostList"].target == "comp-feed.PostList"


class TestDataFlowView:
    """Test the data-flow view."""

    def test_tables_and_endpoints(self, photo_design) -> None:
        """Test one node per table and endpoint."""
        graph = data_flow_view(photo_design.data, photo_design.components)
        kinds = [node.kind for node in graph.nodes]

        assert kinds.count("table") == len(photo_design.data.tables)
        assert kinds.count("api") == len(photo_design.data.endpoints)
        api = next(n for n in graph.nodes if n.id == "api-get-posts")
        assert api.label == "GET /posts"

    def test_endpoint_table_edges(self, photo_design) -> None:
        """Test dashed edges from endpoints to their tables."""
        graph = data_flow_view(photo_design.data, photo_design.components)
        edge = next(e for e in graph.edges if e.id == "api-tbl-get-posts-posts")
        assert (edge.source, edge.target) == ("api-get-posts", "tbl-posts")
        assert edge.dashed and edge.animated

    def test_component_links_follow_endpoint_ids(self, photo_design) -> None:
        """Test that component edges come from recorded endpoint links."""
        graph = data_flow_view(photo_design.data, photo_design.components)
        edge_ids = {edge.id for edge in graph.edges}

        assert "comp-api-feed.PostList-get-posts" in edge_ids
        assert "comp-api-feed.PostCard-get-posts-id" in edge_ids
        assert "comp-api-login.AuthForm-post-auth-login" in edge_ids

    def test_components_without_apis_are_omitted(self, shop_design) -> None:
        """Test that only components declaring APIs are drawn."""
        graph = data_flow_view(shop_design.data, shop_design.components)
        assert "df-comp-cart.CartItemList" not in graph.node_ids()
        assert "df-comp-product-list.ProductList" in graph.node_ids()


class TestDependencyGraphView:
    """Test the dependency-graph view."""

    def test_nodes_keyed_by_id(self, photo_design) -> None:
        """Test one node per component, including same-named ones."""
        graph = dependency_graph_view(photo_design.components)
        all_components = photo_design.components.all_components()

        assert len(graph.nodes) == len(all_components)
        assert {"feed.PostCard", "post-detail.PostCard"} <= graph.node_ids()
        node = next(n for n in graph.nodes if n.id == "feed.PostCard")
        assert node.kind == "feature"
        assert node.data["screen_id"] == "feed"

    def test_edges_match_dependency_pairs(self, photo_design) -> None:
        """Test one edge per resolved dependency."""
        graph = dependency_graph_view(photo_design.components)
        pairs = dependency_pairs(photo_design.components)

        assert len(graph.edges) == len(pairs)
        assert ("post-detail.PostList", "post-detail.PostCard") in {
            (e.source, e.target) for e in graph.edges
        }

    def test_grid(self, photo_design) -> None:
        """Test the five-column grid."""
        graph = dependency_graph_view(photo_design.components)
        assert (graph.nodes[5].position.x, graph.nodes[5].position.y) == (0, 150)
