"""Request logging middleware for NoVague.

Every request is logged when it starts and when it completes, with its
duration, under a correlation id taken from the ``X-Correlation-ID`` header
or generated. Requests addressed to a pipeline session also carry its
``pipeline_id``, so stage logs emitted while handling the request can be
grouped with the request itself.

Example:
    >>> from fastapi import FastAPI
    >>> from novague.web.middleware import RequestLoggingMiddleware
    >>>
    >>> app = FastAPI()
    >>> app.add_middleware(RequestLoggingMiddleware)
"""

from __future__ import annotations

import re
import time
import uuid
from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware

from novague.logging import (
    bind_pipeline_context,
    clear_pipeline_context,
    get_logger,
    set_correlation_id,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from starlette.requests import Request
    from starlette.responses import Response

logger = get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"

_PIPELINE_PATH = re.compile(r"^/pipelines/(?P<pipeline_id>[^/]+)")


def pipeline_id_from_path(path: str) -> str | None:
    """Return the pipeline id addressed by a request path, if any.

    Example:
        >>> pipeline_id_from_path("/pipelines/abc/stages/2/advance")
        'abc'
        >>> pipeline_id_from_path("/health/") is None
        True
    """
    match = _PIPELINE_PATH.match(path)
    return match.group("pipeline_id") if match else None


def _completion_level(status_code: int) -> str:
    if status_code >= 500:
        return "error"
    if status_code >= 400:
        return "warning"
    return "info"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs requests with timing, correlation ids and pipeline context.

    Completed requests are logged at ``info``, client errors (409 state
    conflicts, 404 unknown pipelines) at ``warning`` and server errors at
    ``error``. The correlation id is echoed in the response headers and is
    available to handlers as ``request.state.correlation_id``.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Process request with logging.

        Args:
            request: Incoming HTTP request
            call_next: Next middleware or route handler

        Returns:
            HTTP response from downstream handlers
        """
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id
        set_correlation_id(correlation_id)

        # Stage logs of this request inherit the pipeline id
        pipeline_id = pipeline_id_from_path(request.url.path)
        if pipeline_id is not None:
            bind_pipeline_context(pipeline_id)

        start_time = time.perf_counter()
        logger.debug(
            "request_started",
            method=request.method,
            path=request.url.path,
            query=str(request.url.query) if request.url.query else None,
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "request_failed",
                method=request.method,
                path=request.url.path,
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
                error=str(exc),
                exc_info=True,
            )
            raise
        finally:
            set_correlation_id(None)
            if pipeline_id is not None:
                clear_pipeline_context()

        log = getattr(logger, _completion_level(response.status_code))
        log(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            correlation_id=correlation_id,
            pipeline_id=pipeline_id,
        )
        response.headers[CORRELATION_HEADER] = correlation_id
        return response
