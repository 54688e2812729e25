"""Deterministic, backend-free generators for the design stages."""

from __future__ import annotations

from novague.mock.analysis import mock_analysis, project_name_from_idea
from novague.mock.components import mock_components
from novague.mock.data import mock_data
from novague.mock.ux import mock_ux

__all__ = [
    "mock_analysis",
    "mock_components",
    "mock_data",
    "mock_ux",
    "project_name_from_idea",
]
