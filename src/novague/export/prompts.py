"""Implementation prompt export for assembled project nodes.

Example usage:
    >>> node = project.get_node("feed.PostList")
    >>> print(generate_component_prompt(node, project))
"""

from __future__ import annotations

import structlog

from novague.export.loader import TemplateLoader
from novague.models.project import Project, ProjectNode

logger = structlog.get_logger(__name__)

COMPONENT_TEMPLATE = "component_prompt.j2"

_loader: TemplateLoader | None = None


def _get_loader() -> TemplateLoader:
    global _loader
    if _loader is None:
        _loader = TemplateLoader()
    return _loader


def dependency_labels(node: ProjectNode, project: Project) -> list[str]:
    """Labels of the nodes ``node`` depends on; unknown ids are kept as is."""
    labels = []
    for node_id in node.data.dependencies:
        target = project.get_node(node_id)
        labels.append(target.data.label if target is not None else node_id)
    return labels


def generate_component_prompt(
    component: ProjectNode | None,
    project: Project | None,
    loader: TemplateLoader | None = None,
) -> str:
    """Render the implementation prompt for one project node.

    Args:
        component: Node to implement (page, component, api or database)
        project: Project the node belongs to, used for context and labels
        loader: Template loader; the bundled templates when omitted

    Returns:
        Markdown prompt text

    Raises:
        ValueError: If the component or the project is missing
    """
    if component is None:
        raise ValueError("Component data is missing or invalid")
    if project is None:
        raise ValueError("Project context is missing")

    template = (loader or _get_loader()).load_template(COMPONENT_TEMPLATE)
    prompt = template.render(
        data=component.data,
        project=project,
        dependency_labels=dependency_labels(component, project),
    )
    logger.info(
        "prompt_generated",
        node_id=component.id,
        node_type=component.data.type,
        prompt_length=len(prompt),
    )
    return prompt
