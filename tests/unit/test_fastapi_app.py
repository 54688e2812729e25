"""Unit tests for FastAPI application setup.

Tests cover:
- Application factory creates FastAPI instance
- CORS middleware is configured correctly
- Request logging middleware is active
- Health and readiness endpoints
- Lifespan management of the HTTP generation backend
"""

from __future__ import annotations

import pytest
import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from httpx import ASGITransport, AsyncClient

from novague.config import GenerationConfig, NovagueConfig, WebConfig
from novague.generation.backend import HttpGenerationBackend
from novague.logging import get_correlation_id
from novague.pipeline.registry import PipelineRegistry
from novague.web import middleware
from novague.web.app import create_app
from novague.web.middleware import RequestLoggingMiddleware


class StubBackend:
    """Backend that is never expected to be called."""

    async def generate(self, config, prompt, schema):
        raise AssertionError("unexpected generation call")


@pytest.fixture
def app(config: NovagueConfig) -> FastAPI:
    """Create app without a generation credential."""
    return create_app(config)


class TestCreateApp:
    """Test application factory function."""

    def test_returns_fastapi_instance(self, app: FastAPI) -> None:
        """Test that create_app returns a FastAPI instance."""
        assert isinstance(app, FastAPI)

    def test_app_has_correct_title(self, app: FastAPI) -> None:
        """Test that app has correct title."""
        assert app.title == "NoVague"

    def test_app_has_version(self, app: FastAPI) -> None:
        """Test that app has version set."""
        assert app.version == "0.1.0"

    def test_app_stores_config_in_state(self, config: NovagueConfig) -> None:
        """Test that config is stored in app.state."""
        app = create_app(config)
        assert app.state.config is config

    def test_registry_in_state(self, app: FastAPI) -> None:
        """Test that an empty registry is created with the app."""
        assert isinstance(app.state.registry, PipelineRegistry)
        assert len(app.state.registry) == 0
        assert app.state.registry.backend is None

    def test_injected_backend(self, config: NovagueConfig) -> None:
        """Test that an injected backend is shared through the registry."""
        backend = StubBackend()
        app = create_app(config, backend=backend)
        assert app.state.registry.backend is backend

    def test_uses_default_config_when_none_provided(self) -> None:
        """Test that default config is used when none provided."""
        app = create_app()
        assert isinstance(app.state.config, NovagueConfig)


class TestCorsMiddleware:
    """Test CORS middleware configuration."""

    def test_cors_uses_config_origins(self) -> None:
        """Test that CORS middleware uses origins from config."""
        origins = ["https://app.example.com", "https://admin.example.com"]
        app = create_app(NovagueConfig(web=WebConfig(cors_origins=origins)))

        cors = [m for m in app.user_middleware if m.cls == CORSMiddleware]

        assert len(cors) == 1
        assert cors[0].kwargs["allow_origins"] == origins
        assert cors[0].kwargs["allow_credentials"] is True
        assert cors[0].kwargs["allow_methods"] == ["*"]


class TestRequestLoggingMiddleware:
    """Test request logging middleware configuration."""

    def test_logging_middleware_is_registered(self, app: FastAPI) -> None:
        """Test that RequestLoggingMiddleware is added to the app."""
        assert any(m.cls == RequestLoggingMiddleware for m in app.user_middleware)

    @pytest.mark.asyncio
    async def test_response_includes_correlation_id(self, app: FastAPI) -> None:
        """Test that response includes X-Correlation-ID header."""
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/health/")
        assert response.headers["X-Correlation-ID"]

    @pytest.mark.asyncio
    async def test_response_echoes_provided_correlation_id(self, app: FastAPI) -> None:
        """Test that provided correlation ID is echoed in response."""
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/health/", headers={"X-Correlation-ID": "corr-12345"})
        assert response.headers["X-Correlation-ID"] == "corr-12345"


class RecordingLogger:
    """Collects (level, event, fields) tuples in place of the module logger."""

    def __init__(self) -> None:
        self.records: list[tuple[str, str, dict]] = []

    def _record(self, level: str):
        def log(event: str, **fields) -> None:
            self.records.append((level, event, fields))

        return log

    def __getattr__(self, level: str):
        return self._record(level)

    def completed(self) -> tuple[str, dict]:
        return next((lvl, f) for lvl, e, f in self.records if e == "request_completed")


class TestPipelineRequestLogging:
    """Test what the middleware logs for pipeline requests."""

    @pytest.fixture
    def recorder(self, monkeypatch: pytest.MonkeyPatch) -> RecordingLogger:
        recorder = RecordingLogger()
        monkeypatch.setattr(middleware, "logger", recorder)
        return recorder

    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("/pipelines/abc", "abc"),
            ("/pipelines/abc/stages/2/advance", "abc"),
            ("/pipelines/", None),
            ("/health/ready", None),
            ("/api/generate-prompt", None),
        ],
    )
    def test_pipeline_id_from_path(self, path: str, expected: str | None) -> None:
        """Test extracting the addressed pipeline id."""
        assert middleware.pipeline_id_from_path(path) == expected

    @pytest.mark.asyncio
    async def test_success_logged_at_info(self, app: FastAPI, recorder: RecordingLogger) -> None:
        """Test that successful requests complete at info without a pipeline id."""
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            await client.get("/health/", headers={"X-Correlation-ID": "corr-1"})

        level, fields = recorder.completed()
        assert level == "info"
        assert fields["status_code"] == 200
        assert fields["correlation_id"] == "corr-1"
        assert fields["pipeline_id"] is None

    @pytest.mark.asyncio
    async def test_unknown_pipeline_logged_at_warning(
        self, app: FastAPI, recorder: RecordingLogger
    ) -> None:
        """Test that a 404 for a pipeline is a warning carrying its id."""
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/pipelines/nope")

        assert response.status_code == 404
        level, fields = recorder.completed()
        assert level == "warning"
        assert fields["pipeline_id"] == "nope"
        assert fields["status_code"] == 404

    @pytest.mark.asyncio
    async def test_context_cleared_after_request(
        self, app: FastAPI, recorder: RecordingLogger
    ) -> None:
        """Test that pipeline and correlation context do not leak past the request."""
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            await client.get("/pipelines/nope")

        assert get_correlation_id() is None
        assert "pipeline_id" not in structlog.contextvars.get_contextvars()


class TestHealthEndpoints:
    """Test health and readiness endpoints."""

    @pytest.mark.asyncio
    async def test_health(self, app: FastAPI) -> None:
        """Test that /health/ returns ok."""
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/health/")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    @pytest.mark.asyncio
    async def test_readiness_mock_mode(self, app: FastAPI) -> None:
        """Test that readiness reports mock generation without a credential."""
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/health/ready")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "backend": "mock", "pipelines": 0}

    @pytest.mark.asyncio
    async def test_readiness_configured_backend(self) -> None:
        """Test that readiness reports a configured backend."""
        config = NovagueConfig(generation=GenerationConfig(api_key="sk-test"))
        app = create_app(config, backend=StubBackend())
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/health/ready")
        assert response.json()["backend"] == "configured"

    @pytest.mark.asyncio
    async def test_readiness_backend_without_credential(self, config: NovagueConfig) -> None:
        """Test that a backend without a credential still means mock mode."""
        app = create_app(config, backend=StubBackend())
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/health/ready")
        assert response.json()["backend"] == "mock"


class TestLifespan:
    """Test generation backend lifecycle."""

    @pytest.mark.asyncio
    async def test_http_backend_opened_with_credential(self) -> None:
        """Test that a credential opens the HTTP backend for the app lifetime."""
        app = create_app(NovagueConfig(generation=GenerationConfig(api_key="sk-test")))

        async with app.router.lifespan_context(app):
            assert isinstance(app.state.registry.backend, HttpGenerationBackend)

        assert app.state.registry.backend is None

    @pytest.mark.asyncio
    async def test_no_backend_without_credential(self, app: FastAPI) -> None:
        """Test that mock mode opens nothing."""
        async with app.router.lifespan_context(app):
            assert app.state.registry.backend is None

    @pytest.mark.asyncio
    async def test_injected_backend_kept(self, config: NovagueConfig) -> None:
        """Test that an injected backend is left untouched."""
        backend = StubBackend()
        app = create_app(config, backend=backend)
        async with app.router.lifespan_context(app):
            assert app.state.registry.backend is backend
        assert app.state.registry.backend is backend


class TestRouterRegistration:
    """Test that routers are properly registered."""

    def test_routes_exist(self, app: FastAPI) -> None:
        """Test the health, pipeline and prompt routes."""
        routes = {route.path for route in app.routes}
        assert {
            "/health/",
            "/health/ready",
            "/pipelines/",
            "/pipelines/{pipeline_id}",
            "/pipelines/{pipeline_id}/stages/{stage}/advance",
            "/pipelines/{pipeline_id}/graph/{mode}",
            "/api/generate-prompt",
        } <= routes
