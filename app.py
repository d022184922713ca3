"""FastAPI application factory."""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from api.errors import register_error_handlers
from api.handlers import ForwardEndpoint
from core.config import Config
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from services.forwarding_service import ForwardingService
from services.upstream import UpstreamClient


def create_app(
    config: Config,
    logger: RequestLogger,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        limits = httpx.Limits(
            max_connections=config.limits.max_connections,
            max_keepalive_connections=config.limits.max_keepalive_connections,
        )
        upstream_client = httpx.AsyncClient(
            timeout=config.upstream.timeout,
            limits=limits,
            follow_redirects=False,
            transport=transport,
        )
        header_builder = HeaderBuilder()
        app.state.upstream_client = UpstreamClient(upstream_client, header_builder)
        app.state.forwarding_service = ForwardingService(config, header_builder)
        try:
            yield
        finally:
            await upstream_client.aclose()

    app = FastAPI(
        title="Privacy Relay",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    register_error_handlers(app)

    # ASGI endpoint with no method list, so every method is relayed
    app.router.add_route("/{path:path}", ForwardEndpoint(logger))

    return app
