"""Main ASGI application entry point.

A single stateless handler is bound to every inbound path:

    Starlette App
      └── /{path:path} → handle_request
            ├── /                → homepage
            └── /<domain>.ico    → favicon from the first willing provider

The only process-wide object is the outbound ``httpx.AsyncClient``, created
and closed by the lifespan and used purely for connection pooling.

Usage:
    favicons-proxy

    # Or with overrides
    PORT=9000 LOG_LEVEL=debug python -m favicons_proxy.app
"""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import TYPE_CHECKING

import httpx
from starlette.applications import Starlette
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Route

from favicons_proxy.config import Settings
from favicons_proxy.observability import (
    TraceContextMiddleware,
    configure_logging,
    init_tracing,
    start_metrics_server,
    trace_request,
)
from favicons_proxy.service_layer.resolver import FaviconResolver


if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.responses import Response


logger = logging.getLogger(__name__)

PROXY_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


async def handle_request(request: Request) -> Response:
    """Route every inbound request through the app's favicon resolver."""
    resolver: FaviconResolver = request.app.state.resolver
    return await resolver.handle(request)


def create_app(
    settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Starlette:
    """Create ASGI application.

    Args:
        settings: Server settings (defaults to environment-driven ``Settings()``)
        transport: Optional transport for the outbound client, e.g.
            ``httpx.MockTransport`` in tests

    Returns:
        Starlette application serving the homepage and favicon routes
    """
    settings = settings or Settings()

    @asynccontextmanager
    async def lifespan(app: Starlette):
        async with httpx.AsyncClient(transport=transport, follow_redirects=True) as client:
            app.state.resolver = FaviconResolver(client)
            logger.info("Favicon resolver ready")
            try:
                yield
            finally:
                logger.info("Closing upstream HTTP client")

    app = Starlette(
        debug=settings.debug,
        routes=[Route("/{path:path}", endpoint=handle_request, methods=PROXY_METHODS)],
        lifespan=lifespan,
    )
    app.add_middleware(BaseHTTPMiddleware, dispatch=trace_request)
    app.add_middleware(TraceContextMiddleware)
    return app


def main() -> None:
    """Main entry point for the favicons proxy server."""
    import uvicorn

    settings = Settings()

    configure_logging(
        level=settings.log_level,
        json_output=settings.log_json,
        logger_levels={"uvicorn": settings.log_level, "uvicorn.error": settings.log_level},
        access_log=settings.access_log,
    )
    init_tracing(service_name="favicons-proxy")
    start_metrics_server(settings.metrics_port)

    app = create_app(settings)

    logger.info("Starting favicons proxy on %s:%d", settings.host, settings.port)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        log_config=None,  # Keep our logging config
        limit_concurrency=settings.uvicorn_limit_concurrency,
    )


if __name__ == "__main__":
    main()
