import pytest

from core.config import Config, UpstreamSettings
from core.exceptions import ConfigurationError
from core.headers import HeaderBuilder
from services.forwarding_service import ForwardingService, should_have_body


async def _body():
    yield b'{"a":1}'


def _service(base_url="https://api.day.app/v1/"):
    return ForwardingService(Config(upstream=UpstreamSettings(base_url=base_url)), HeaderBuilder())


@pytest.mark.parametrize(
    ("method", "expected"),
    [("GET", False), ("head", False), ("POST", True), ("put", True), ("DELETE", True), ("OPTIONS", True)],
)
def test_should_have_body(method, expected):
    assert should_have_body(method) is expected


class TestForwardingService:
    def test_prepares_target_and_method(self):
        prepared = _service().prepare("post", b"/push/", b"", [("content-length", "7")], _body())
        assert prepared.method == "POST"
        assert str(prepared.url) == "https://api.day.app/v1/push/"
        assert prepared.content is not None

    def test_get_never_carries_body(self):
        prepared = _service().prepare("GET", b"/x", b"", [("content-length", "7")], _body())
        assert prepared.content is None
        assert all(key != "content-length" for key, _ in prepared.headers)

    def test_head_never_carries_body(self):
        prepared = _service().prepare("HEAD", b"/x", b"", [("transfer-encoding", "chunked")], _body())
        assert prepared.content is None

    def test_body_only_when_declared(self):
        prepared = _service().prepare("DELETE", b"/x", b"", [("accept", "*/*")], _body())
        assert prepared.content is None

    def test_chunked_body_is_forwarded_without_framing_header(self):
        prepared = _service().prepare("PUT", b"/x", b"", [("Transfer-Encoding", "chunked")], _body())
        assert prepared.content is not None
        assert all(key.lower() != "transfer-encoding" for key, _ in prepared.headers)

    def test_missing_upstream_raises(self):
        with pytest.raises(ConfigurationError):
            _service("").prepare("GET", b"/", b"", [])
