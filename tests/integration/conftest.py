"""Pytest fixtures for integration tests.

The web fixtures serve a real application over ASGITransport with the mock
generators, so full pipelines run in-process without network access.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from novague.config import NovagueConfig
from novague.web.app import create_app


@pytest.fixture
def app(config: NovagueConfig) -> FastAPI:
    """Application running every stage on the mock generators."""
    return create_app(config)


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client bound to the test application.

    Yields:
        AsyncClient instance for making test requests.
    """
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run away from real config files and NOVAGUE_ variables.

    Returns:
        The temporary working directory.
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.delenv("NOVAGUE_GENERATION__API_KEY", raising=False)
    return tmp_path
