"""Upstream target URL construction."""

from urllib.parse import quote_from_bytes

import httpx

# Printable ASCII travels as sent; '#' would start a fragment.
_TARGET_SAFE = "".join(chr(i) for i in range(0x21, 0x7F) if chr(i) != "#")


def join_path(base_path: str, add_path: str) -> str:
    """Join base and inbound paths without a double slash at the junction."""
    base = (base_path or "").rstrip("/")
    add = (add_path or "").lstrip("/")
    if not base:
        return "/" + add
    return f"{base}/{add}"


def encode_target(raw: bytes) -> bytes:
    """Percent-encode only the bytes a request-target cannot carry.

    Non-ASCII, space and control bytes are escaped; existing escapes and every
    other byte are kept exactly as received.
    """
    return quote_from_bytes(raw, safe=_TARGET_SAFE).encode("ascii")


def build_target_url(base: httpx.URL, raw_path: bytes, query: bytes) -> httpx.URL:
    """Map an inbound raw path and query onto the upstream base.

    Scheme, host and port come from the base. The inbound query replaces the
    base query entirely; an empty inbound query leaves the target without one.
    """
    base_path = base.raw_path.partition(b"?")[0].decode("ascii")
    path = join_path(base_path, encode_target(raw_path).decode("ascii")).encode("ascii")
    if query:
        path += b"?" + encode_target(query)
    return base.copy_with(raw_path=path)
