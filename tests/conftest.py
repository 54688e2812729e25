"""Shared pytest fixtures.

Artifacts are built with the mock generators so that every test sees the
same deterministic designs for two reference ideas: a photo sharing app
and an online shop.
"""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from novague.config import GenerationConfig, NovagueConfig
from novague.linking import link_component_endpoints
from novague.mock import mock_analysis, mock_components, mock_data, mock_ux
from novague.models.analysis import ProjectAnalysis
from novague.models.components import ComponentArchitecture
from novague.models.data import DataArchitecture
from novague.models.ux import ScreenAnalysis
from novague.stages.contracts import StageContext

PHOTO_IDEA = "an Instagram-like photo sharing app"
SHOP_IDEA = "an online shop"


@dataclass
class DesignArtifacts:
    """Stage 1-4 artifacts for one idea."""

    analysis: ProjectAnalysis
    ux: ScreenAnalysis
    data: DataArchitecture
    components: ComponentArchitecture


def build_artifacts(idea: str) -> DesignArtifacts:
    """Run the mock generators for stages 1-4 and link endpoints."""
    analysis = mock_analysis(idea)
    ux = mock_ux(analysis)
    data = mock_data(analysis, ux)
    components = link_component_endpoints(mock_components(ux, data), data)
    return DesignArtifacts(analysis=analysis, ux=ux, data=data, components=components)


@pytest.fixture
def config(monkeypatch: pytest.MonkeyPatch) -> NovagueConfig:
    """Configuration with no generation credential."""
    monkeypatch.delenv("NOVAGUE_GENERATION__API_KEY", raising=False)
    return NovagueConfig(generation=GenerationConfig(api_key=None))


@pytest.fixture
def stage_context(config: NovagueConfig) -> StageContext:
    """Stage context that always runs the mock generators."""
    return StageContext(config=config)


@pytest.fixture
def photo_design() -> DesignArtifacts:
    """Artifacts for the photo sharing idea."""
    return build_artifacts(PHOTO_IDEA)


@pytest.fixture
def shop_design() -> DesignArtifacts:
    """Artifacts for the online shop idea."""
    return build_artifacts(SHOP_IDEA)


@pytest.fixture
def design_factory():
    """Factory building fresh artifacts for any idea."""
    return build_artifacts
