"""Request preparation for the upstream relay."""

from collections.abc import AsyncIterator, Iterable

from core.config import Config, resolve_upstream_base
from core.headers import HeaderBuilder
from core.request_types import PreparedRequest
from core.target import build_target_url

BODYLESS_METHODS = frozenset({"GET", "HEAD"})


def should_have_body(method: str) -> bool:
    return method.upper() not in BODYLESS_METHODS


class ForwardingService:
    """Turn an inbound request into a sanitized upstream request."""

    def __init__(self, config: Config, header_builder: HeaderBuilder) -> None:
        self._config = config
        self._headers = header_builder

    def prepare(
        self,
        method: str,
        raw_path: bytes,
        query: bytes,
        headers: Iterable[tuple[str, str]],
        body: AsyncIterator[bytes] | None = None,
    ) -> PreparedRequest:
        """Prepare the upstream request.

        Raises:
            ConfigurationError: If the upstream base is missing or invalid.
        """
        base = resolve_upstream_base(self._config)
        method = method.upper()
        headers = list(headers)

        # A request declares a body through content-length or transfer-encoding.
        declares_body = any(
            key.lower() in ("content-length", "transfer-encoding") for key, _ in headers
        )
        with_body = body is not None and declares_body and should_have_body(method)

        return PreparedRequest(
            method=method,
            url=build_target_url(base, raw_path, query),
            headers=self._headers.build_upstream_headers(headers, with_body=with_body),
            content=body if with_body else None,
        )
