"""Cross-artifact reference resolution.

Components reference endpoints as ``METHOD /path`` strings and other
components by id or name. This module turns those references into stable
links:

- ``link_component_endpoints`` records ``endpoint_ids`` on every component
  when the component artifact is produced, so later consumers never re-match
  strings.
- ``resolve_component`` and ``dependency_pairs`` resolve component
  dependencies to component ids.
"""

from __future__ import annotations

from collections.abc import Iterable

from novague.models.components import Component, ComponentArchitecture
from novague.models.data import APIEndpoint, DataArchitecture

HTTP_METHODS = frozenset({"GET", "POST", "PUT", "DELETE", "PATCH"})


def split_api_reference(ref: str) -> tuple[str | None, str]:
    """Split ``"GET /posts"`` into ``("GET", "/posts")``.

    References without a method prefix return ``(None, ref)``.
    """
    parts = ref.strip().split(None, 1)
    if len(parts) == 2 and parts[0].upper() in HTTP_METHODS:
        return parts[0].upper(), parts[1].strip()
    return None, ref.strip()


def paths_overlap(left: str, right: str) -> bool:
    """Substring match in either direction, ignoring bare ``/``."""
    left, right = left.strip(), right.strip()
    if not left.strip("/") or not right.strip("/"):
        return False
    return left in right or right in left


def find_endpoint_by_path(ref: str, endpoints: Iterable[APIEndpoint]) -> APIEndpoint | None:
    """First endpoint whose path overlaps the reference path, method ignored."""
    _, path = split_api_reference(ref)
    return next((e for e in endpoints if paths_overlap(path, e.path)), None)


def match_endpoint(ref: str, endpoints: Iterable[APIEndpoint]) -> APIEndpoint | None:
    """Resolve an API reference to an endpoint.

    Tried in order: exact method and path, exact path, overlapping path.
    """
    candidates = list(endpoints)
    method, path = split_api_reference(ref)

    # METHOD /path
    if method is not None:
        exact = next((e for e in candidates if e.method == method and e.path == path), None)
        if exact is not None:
            return exact

    # /path, any method
    same_path = next((e for e in candidates if e.path == path), None)
    if same_path is not None:
        return same_path

    # Prefix either way, e.g. /posts/:id/likes under /posts/:id
    return find_endpoint_by_path(path, candidates)


def link_component_endpoints(
    components: ComponentArchitecture, data: DataArchitecture
) -> ComponentArchitecture:
    """Record ``endpoint_ids`` on every component from its API references.

    Unresolvable references are left out of the links; they remain in
    ``dependencies.apis`` for the validator to report.

    Returns:
        The same artifact, updated in place
    """
    for component in components.all_components():
        # Rebuilt from scratch; stale links from an earlier run are dropped
        linked: list[str] = []
        for ref in component.dependencies.apis:
            endpoint = match_endpoint(ref, data.endpoints)
            # Unresolved, or two references to one endpoint
            if endpoint is None or endpoint.id in linked:
                continue
            linked.append(endpoint.id)
        component.endpoint_ids = linked
    return components


def resolve_component(
    ref: str, screen_id: str | None, components: ComponentArchitecture
) -> Component | None:
    """Resolve a component dependency reference.

    Tried in order: component id, name within the same screen, name in the
    shared pool, first component anywhere with that name.
    """
    by_id = components.get_component(ref)
    if by_id is not None:
        return by_id

    if screen_id is not None:
        group = components.for_screen(screen_id)
        if group is not None:
            local = next((c for c in group.components() if c.name == ref), None)
            if local is not None:
                return local

    shared = next((c for c in components.shared_components if c.name == ref), None)
    if shared is not None:
        return shared

    return next((c for c in components.all_components() if c.name == ref), None)


def dependency_pairs(components: ComponentArchitecture) -> list[tuple[Component, Component]]:
    """Every resolved ``(dependent, dependency)`` pair, deduplicated.

    Unresolvable references and self references are dropped.
    """
    pairs: list[tuple[Component, Component]] = []
    seen: set[tuple[str, str]] = set()
    for screen_id, component in components.iter_components():
        for ref in component.dependencies.components:
            target = resolve_component(ref, screen_id, components)
            if target is None or target.id == component.id:
                continue
            key = (component.id, target.id)
            if key not in seen:
                seen.add(key)
                pairs.append((component, target))
    return pairs
