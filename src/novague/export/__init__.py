"""Prompt export for assembled projects."""

from __future__ import annotations

from novague.export.loader import TemplateLoader
from novague.export.prompts import dependency_labels, generate_component_prompt

__all__ = ["TemplateLoader", "dependency_labels", "generate_component_prompt"]
