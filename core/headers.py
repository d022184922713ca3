"""Header sanitization for upstream requests and relayed responses."""

from collections.abc import Iterable

# RFC 7230 hop-by-hop headers
HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
    }
)

# Proxy chain and client IP headers
CLIENT_IDENTITY_HEADERS = frozenset(
    {
        "x-forwarded-for",
        "x-forwarded-proto",
        "x-forwarded-host",
        "x-real-ip",
        "forwarded",
        "true-client-ip",
        "cf-connecting-ip",
        "cf-ipcountry",
        "cf-ray",
        "cf-visitor",
        "via",
        "x-client-ip",
        "x-cluster-client-ip",
    }
)

STRIPPED_REQUEST_HEADERS = HOP_BY_HOP_HEADERS | CLIENT_IDENTITY_HEADERS

CACHE_CONTROL = "cache-control"
NO_STORE = "no-store"

SAFETY_HEADERS: dict[str, str] = {
    "x-content-type-options": "nosniff",
    "referrer-policy": "no-referrer",
    CACHE_CONTROL: NO_STORE,
}

HeaderList = list[tuple[str, str]]


def strip_headers(headers: Iterable[tuple[str, str]], names: frozenset[str]) -> HeaderList:
    """Drop every occurrence of the given (lower-case) header names."""
    return [(key, value) for key, value in headers if key.lower() not in names]


def safety_headers() -> HeaderList:
    """Header set for the relay's own error responses."""
    return list(SAFETY_HEADERS.items())


class HeaderBuilder:
    """Build sanitized headers for both directions of a relayed exchange."""

    def build_upstream_headers(
        self,
        headers: Iterable[tuple[str, str]],
        *,
        with_body: bool,
    ) -> HeaderList:
        """Sanitize inbound request headers for the upstream call.

        Host is dropped so the client derives it from the target URL, and a
        content-length is only kept when the body is actually forwarded.
        """
        dropped = STRIPPED_REQUEST_HEADERS | {"host", CACHE_CONTROL}
        if not with_body:
            dropped = dropped | {"content-length"}
        upstream = strip_headers(headers, dropped)
        upstream.append((CACHE_CONTROL, NO_STORE))
        return upstream

    def build_response_headers(self, headers: Iterable[tuple[str, str]]) -> HeaderList:
        """Overlay no-store and any missing safety headers on upstream headers.

        Connection-level framing headers are left to the serving ASGI server.
        """
        relayed = strip_headers(headers, HOP_BY_HOP_HEADERS | {CACHE_CONTROL})
        relayed.append((CACHE_CONTROL, NO_STORE))
        present = {key.lower() for key, _ in relayed}
        for key, value in SAFETY_HEADERS.items():
            if key not in present:
                relayed.append((key, value))
        return relayed
