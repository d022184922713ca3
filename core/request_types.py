"""Shared request data types."""

from collections.abc import AsyncIterator
from dataclasses import dataclass

import httpx


@dataclass(frozen=True)
class PreparedRequest:
    """Prepared data for an upstream request."""

    method: str
    url: httpx.URL
    headers: list[tuple[str, str]]
    content: AsyncIterator[bytes] | None = None
