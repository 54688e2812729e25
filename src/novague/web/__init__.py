"""Web interface for NoVague.

FastAPI application exposing pipeline sessions, graph projections, the
assembled project and prompt export.
"""

from __future__ import annotations

from novague.web.app import create_app
from novague.web.middleware import RequestLoggingMiddleware

__all__ = [
    "RequestLoggingMiddleware",
    "create_app",
]
