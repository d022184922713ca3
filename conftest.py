import httpx
import pytest
from fastapi.testclient import TestClient

from app import create_app
from core.config import Config, UpstreamSettings


class RecordingLogger:
    """RequestLogger that keeps every call for assertions."""

    def __init__(self):
        self.forwards: list[tuple[str, str, int]] = []
        self.errors: list[tuple[str, int, str]] = []

    def log_forward(self, method, target, status):
        self.forwards.append((method, target, status))

    def log_error(self, route, status, message):
        self.errors.append((route, status, message))


def upstream_response(status_code=200, headers=None, body=b""):
    """Unread upstream response, as a real transport hands it over."""
    headers = list(headers or [])
    if body:
        headers.append(("content-length", str(len(body))))
    return httpx.Response(status_code, headers=headers, stream=httpx.ByteStream(body))


class StubUpstream:
    """httpx handler recording every request it receives."""

    def __init__(self, respond=None):
        self.requests: list[httpx.Request] = []
        self._respond = respond or (lambda request: upstream_response(200, [("content-type", "text/plain")], b"ok"))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._respond(request)

    @property
    def last(self) -> httpx.Request:
        assert self.requests, "upstream was never called"
        return self.requests[-1]


@pytest.fixture
def logger():
    return RecordingLogger()


@pytest.fixture
def make_client(logger):
    """Build a TestClient for the relay in front of a stub upstream."""
    clients = []

    def _make(base_url="https://api.day.app", upstream=None):
        upstream = upstream or StubUpstream()
        config = Config(upstream=UpstreamSettings(base_url=base_url))
        app = create_app(config, logger, transport=httpx.MockTransport(upstream))
        client = TestClient(app, follow_redirects=False)
        client.__enter__()
        clients.append(client)
        return client, upstream

    yield _make

    for client in clients:
        client.__exit__(None, None, None)
