"""Exception handlers mapping proxy errors to plain-text responses."""

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from core.exceptions import ConfigurationError, UpstreamUnavailable
from core.headers import SAFETY_HEADERS


def error_response(status_code: int, message: str) -> PlainTextResponse:
    """Plain-text error response carrying only the safety headers."""
    return PlainTextResponse(message, status_code=status_code, headers=dict(SAFETY_HEADERS))


async def handle_configuration_error(_request: Request, exc: ConfigurationError) -> PlainTextResponse:
    """Missing or invalid upstream configuration -> 500."""
    return error_response(500, exc.message)


async def handle_upstream_unavailable(_request: Request, exc: UpstreamUnavailable) -> PlainTextResponse:
    """Failed upstream exchange -> 502 with the reason."""
    return error_response(502, f"Upstream fetch failed: {exc.reason}")


async def handle_unexpected_error(_request: Request, _exc: Exception) -> PlainTextResponse:
    """Anything else still gets a well-formed 502."""
    return error_response(502, "Upstream fetch failed: internal relay error")


def register_error_handlers(app: FastAPI) -> None:
    """Attach the proxy error handlers to the application."""
    app.add_exception_handler(ConfigurationError, handle_configuration_error)
    app.add_exception_handler(UpstreamUnavailable, handle_upstream_unavailable)
    app.add_exception_handler(Exception, handle_unexpected_error)
