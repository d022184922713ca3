"""HTTP relaying to the configured upstream."""

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable

import httpx
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from core.exceptions import UpstreamUnavailable
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from core.request_types import PreparedRequest

ROUTE_NAME = "upstream"


class UpstreamClient:
    """Relay prepared requests upstream with streaming in both directions."""

    def __init__(self, client: httpx.AsyncClient, header_builder: HeaderBuilder) -> None:
        self._client = client
        self._headers = header_builder

    async def forward(
        self,
        prepared: PreparedRequest,
        logger: RequestLogger,
        until_disconnected: Callable[[], Awaitable[None]] | None = None,
    ) -> StreamingResponse:
        """Send one request upstream and stream its response back.

        Exactly one attempt is made; redirects are returned, not followed.
        When until_disconnected completes before the upstream answers, the
        pending exchange is abandoned.

        Raises:
            UpstreamUnavailable: If the exchange could not be completed.
        """
        target = str(prepared.url.copy_with(raw_path=prepared.url.raw_path.partition(b"?")[0]))

        try:
            # Built directly so the client's default headers are not merged in.
            # Values go out as the bytes received (Starlette decodes latin-1).
            request = httpx.Request(
                prepared.method,
                prepared.url,
                headers=[
                    (key.encode("latin-1"), value.encode("latin-1"))
                    for key, value in prepared.headers
                ],
                content=prepared.content,
                extensions={"timeout": self._client.timeout.as_dict()},
            )
            response = await self._send(request, until_disconnected)
        except httpx.RequestError as e:
            logger.log_error(ROUTE_NAME, 502, f"{target}: {e!r}")
            raise UpstreamUnavailable(str(e) or None) from e
        except Exception as e:
            logger.log_error(ROUTE_NAME, 502, f"{target}: unexpected {e!r}")
            raise UpstreamUnavailable(str(e) or None) from e

        if response is None:
            logger.log_error(ROUTE_NAME, 499, f"{target}: client disconnected")
            raise UpstreamUnavailable("client disconnected")

        logger.log_forward(prepared.method, target, response.status_code)

        relayed = StreamingResponse(
            self._relay_body(response),
            status_code=response.status_code,
            background=BackgroundTask(self._cleanup_streaming, response),
        )
        upstream_headers = [
            (key.decode("latin-1").lower(), value.decode("latin-1"))
            for key, value in response.headers.raw
        ]
        relayed.raw_headers = [
            (key.encode("latin-1"), value.encode("latin-1"))
            for key, value in self._headers.build_response_headers(upstream_headers)
        ]
        return relayed

    async def _send(
        self,
        request: httpx.Request,
        until_disconnected: Callable[[], Awaitable[None]] | None,
    ) -> httpx.Response | None:
        """Send the request; return None if the caller disconnects first."""
        if until_disconnected is None:
            return await self._client.send(request, stream=True, follow_redirects=False)

        send = asyncio.create_task(
            self._client.send(request, stream=True, follow_redirects=False)
        )
        watch = asyncio.create_task(until_disconnected())
        try:
            done, _pending = await asyncio.wait(
                {send, watch},
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            send.cancel()
            raise
        finally:
            watch.cancel()

        if send in done and watch not in done:
            return send.result()

        send.cancel()
        await asyncio.wait({send})
        if not send.cancelled() and send.exception() is None:
            await send.result().aclose()
        return None

    async def _relay_body(self, response: httpx.Response) -> AsyncIterator[bytes]:
        """Yield the upstream body as received, still content-encoded."""
        try:
            async for chunk in response.aiter_raw():
                yield chunk
        finally:
            # Also reached when the caller disconnects mid-stream.
            await response.aclose()

    async def _cleanup_streaming(self, response: httpx.Response) -> None:
        """Clean up streaming resources."""
        await response.aclose()
