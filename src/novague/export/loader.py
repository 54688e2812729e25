"""Template loader for Jinja2-based prompt export."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

if TYPE_CHECKING:
    from jinja2 import Template

TEMPLATE_DIR = Path(__file__).parent / "templates"


class TemplateLoader:
    """Loads and caches the prompt templates.

    Attributes:
        template_dir: Directory the templates are read from
        env: Jinja2 Environment with caching enabled
    """

    def __init__(self, template_dir: Path | None = None) -> None:
        """Initialize the template loader.

        Args:
            template_dir: Directory containing ``*.j2`` templates.
                          Defaults to the bundled templates directory.
        """
        self.template_dir = template_dir or TEMPLATE_DIR
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape(),
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
            cache_size=50,
            auto_reload=False,
        )

    def load_template(self, template_name: str) -> Template:
        """Load a template by name.

        Raises:
            jinja2.TemplateNotFound: If the template doesn't exist
        """
        return self.env.get_template(template_name)

    def list_templates(self) -> list[str]:
        """Names of all available templates."""
        return sorted(self.env.list_templates())
