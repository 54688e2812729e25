"""Unit tests for cross-artifact reference resolution."""

from __future__ import annotations

import pytest

from novague.linking import (
    dependency_pairs,
    find_endpoint_by_path,
    link_component_endpoints,
    match_endpoint,
    paths_overlap,
    resolve_component,
    split_api_reference,
)
from novague.models.data import APIEndpoint


@pytest.fixture
def endpoints() -> list[APIEndpoint]:
    return [
        APIEndpoint(method="GET", path="/posts"),
        APIEndpoint(method="POST", path="/posts"),
        APIEndpoint(method="GET", path="/posts/:id"),
    ]


class TestApiReferences:
    """Test parsing and matching of ``METHOD /path`` references."""

    @pytest.mark.parametrize(
        "ref,expected",
        [
            ("GET /posts", ("GET", "/posts")),
            ("post   /posts", ("POST", "/posts")),
            ("/posts", (None, "/posts")),
            ("FETCH /posts", (None, "FETCH /posts")),
        ],
    )
    def test_split(self, ref: str, expected: tuple) -> None:
        """Test method prefixes are recognised and normalised."""
        assert split_api_reference(ref) == expected

    def test_overlap_ignores_root(self) -> None:
        """Test that the bare root path never overlaps."""
        assert paths_overlap("/posts", "/posts/:id")
        assert not paths_overlap("/", "/posts")
        assert not paths_overlap("/users", "/posts")

    def test_exact_method_and_path_first(self, endpoints: list[APIEndpoint]) -> None:
        """Test that method and path together pick the right endpoint."""
        assert match_endpoint("POST /posts", endpoints).id == "post-posts"
        assert match_endpoint("GET /posts/:id", endpoints).id == "get-posts-id"

    def test_path_only_fallback(self, endpoints: list[APIEndpoint]) -> None:
        """Test that an unknown method still resolves by path."""
        assert match_endpoint("DELETE /posts/:id", endpoints).id == "get-posts-id"
        assert match_endpoint("/posts", endpoints).id == "get-posts"

    def test_overlapping_fallback(self, endpoints: list[APIEndpoint]) -> None:
        """Test the substring fallback and the no-match case."""
        assert match_endpoint("GET /posts/:id/comments", endpoints).id == "get-posts"
        assert match_endpoint("GET /users", endpoints) is None
        assert find_endpoint_by_path("PUT /posts", endpoints).id == "get-posts"


class TestEndpointLinks:
    """Test recording endpoint ids on components."""

    def test_links_recorded(self, photo_design) -> None:
        """Test links for the feed components."""
        components = photo_design.components
        assert components.get_component("feed.PostList").endpoint_ids == ["get-posts"]
        assert components.get_component("feed.PostCard").endpoint_ids == ["get-posts-id"]
        assert components.get_component("login.AuthForm").endpoint_ids == ["post-auth-login"]

    def test_unresolvable_references_are_not_linked(self, photo_design) -> None:
        """Test that unknown references stay only in the declared apis."""
        post_list = photo_design.components.get_component("feed.PostList")
        post_list.dependencies.apis.append("GET /comments")

        link_component_endpoints(photo_design.components, photo_design.data)

        assert post_list.endpoint_ids == ["get-posts"]
        assert "GET /comments" in post_list.dependencies.apis

    def test_links_are_not_duplicated(self, photo_design) -> None:
        """Test that two references to one endpoint yield one link."""
        post_list = photo_design.components.get_component("feed.PostList")
        post_list.dependencies.apis.append("/posts")

        link_component_endpoints(photo_design.components, photo_design.data)

        assert post_list.endpoint_ids == ["get-posts"]


class TestComponentResolution:
    """Test component dependency resolution."""

    def test_local_name_before_shared(self, photo_design) -> None:
        """Test that a name resolves within the same screen first."""
        target = resolve_component("PostCard", "post-detail", photo_design.components)
        assert target.id == "post-detail.PostCard"

    def test_shared_pool(self, photo_design) -> None:
        """Test that shared UI names resolve to the shared pool."""
        assert resolve_component("Avatar", "feed", photo_design.components).id == "shared.Avatar"

    def test_by_id(self, photo_design) -> None:
        """Test that ids resolve directly."""
        target = resolve_component("feed.PostCard", None, photo_design.components)
        assert target.id == "feed.PostCard"

    def test_unknown(self, photo_design) -> None:
        """Test that unknown references resolve to None."""
        assert resolve_component("Carousel", "feed", photo_design.components) is None

    def test_dependency_pairs(self, photo_design) -> None:
        """Test that pairs are unique and point at resolved ids."""
        pairs = [(a.id, b.id) for a, b in dependency_pairs(photo_design.components)]
        assert len(pairs) == len(set(pairs))
        assert ("feed.PostList", "feed.PostCard") in pairs
        assert ("feed.PostCard", "shared.Avatar") in pairs
        assert all(a != b for a, b in pairs)
