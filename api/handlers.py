"""Route handlers."""

import asyncio
from collections.abc import AsyncIterator

from fastapi import Request
from fastapi.responses import StreamingResponse
from starlette.types import Receive, Scope, Send

from core.exceptions import ConfigurationError
from core.protocols import RequestLogger


class ForwardEndpoint:
    """ASGI endpoint relaying requests of any method to the upstream."""

    def __init__(self, logger: RequestLogger) -> None:
        self._logger = logger

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive)
        response = await handle_forward(request, self._logger)
        await response(scope, receive, send)


def _inbound_target(request: Request) -> tuple[bytes, bytes]:
    """Return the inbound (raw path, raw query) bytes exactly as received."""
    raw_path = request.scope.get("raw_path") or request.url.path.encode("utf-8")
    # Some servers include the query in raw_path
    return raw_path.partition(b"?")[0], request.scope.get("query_string", b"")


async def _read_body(request: Request, body_read: asyncio.Event) -> AsyncIterator[bytes]:
    try:
        async for chunk in request.stream():
            yield chunk
    finally:
        body_read.set()


async def _until_disconnected(request: Request, body_read: asyncio.Event) -> None:
    """Return once the caller has closed the connection.

    Only listens after the forwarded body is fully read, so no body chunk is
    taken from the upload stream.
    """
    await body_read.wait()
    while (await request.receive())["type"] != "http.disconnect":
        pass


async def handle_forward(request: Request, logger: RequestLogger) -> StreamingResponse:
    """Relay any inbound request to the configured upstream."""
    forwarding_service = request.app.state.forwarding_service
    raw_path, query = _inbound_target(request)
    body_read = asyncio.Event()

    try:
        prepared = forwarding_service.prepare(
            request.method,
            raw_path,
            query,
            request.headers.items(),
            _read_body(request, body_read),
        )
    except ConfigurationError as e:
        logger.log_error("config", 500, e.message)
        raise

    if prepared.content is None:
        body_read.set()

    upstream = request.app.state.upstream_client
    return await upstream.forward(
        prepared,
        logger,
        until_disconnected=lambda: _until_disconnected(request, body_read),
    )
