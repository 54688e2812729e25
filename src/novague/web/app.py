"""FastAPI application factory for NoVague.

The application serves the pipeline session API, the prompt export endpoint
and health checks. Pipelines are held in an in-memory registry created with
the app. When a generation credential is configured and no backend is
injected, an HTTP generation backend is opened for the app's lifetime.

Example usage:
    >>> from novague.config import NovagueConfig
    >>> from novague.web.app import create_app
    >>>
    >>> app = create_app(NovagueConfig())
    >>>
    >>> import uvicorn
    >>> uvicorn.run(app, host="127.0.0.1", port=8000)
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from novague import __version__
from novague.config import NovagueConfig
from novague.generation.backend import GenerationBackend, HttpGenerationBackend
from novague.logging import get_logger
from novague.pipeline.registry import PipelineRegistry
from novague.web.middleware import RequestLoggingMiddleware
from novague.web.routes.health import create_health_router
from novague.web.routes.pipelines import create_pipelines_router
from novague.web.routes.prompts import create_prompts_router

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = get_logger(__name__)

APP_VERSION = __version__


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the HTTP generation backend when one is needed.

    Args:
        app: FastAPI application instance

    Yields:
        None after startup, closes the backend client on exit
    """
    config: NovagueConfig = app.state.config
    registry: PipelineRegistry = app.state.registry

    logger.info("app_startup_begin", host=config.web.host, port=config.web.port)

    if registry.backend is not None or not config.generation.has_credential:
        logger.info(
            "generation_mode_selected",
            backend="configured" if registry.backend is not None else "mock",
        )
        yield
        logger.info("app_shutdown_begin")
        return

    async with HttpGenerationBackend() as backend:
        registry.backend = backend
        logger.info(
            "generation_backend_opened",
            provider=config.generation.provider,
            model=config.generation.model,
        )
        try:
            yield
        finally:
            logger.info("app_shutdown_begin")
            registry.backend = None
    logger.info("generation_backend_closed")


def create_app(
    config: NovagueConfig | None = None,
    backend: GenerationBackend | None = None,
) -> FastAPI:
    """Create and configure a FastAPI application.

    Args:
        config: Optional NovagueConfig. If None, creates default config.
        backend: Optional generation backend shared by all pipelines. If
            None, one is opened at startup when a credential is configured.

    Returns:
        Configured FastAPI application instance.
    """
    if config is None:
        config = NovagueConfig()

    app = FastAPI(
        title="NoVague",
        version=APP_VERSION,
        description="Staged design pipeline from idea to specified architecture",
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.registry = PipelineRegistry(config, backend)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.web.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(create_health_router())
    app.include_router(create_pipelines_router())
    app.include_router(create_prompts_router())

    logger.info(
        "app_created",
        cors_origins=config.web.cors_origins,
        version=APP_VERSION,
    )

    return app
