"""Shared protocol definitions."""

from typing import Protocol


class RequestLogger(Protocol):
    """Protocol for request logging (console and CLI log file)."""

    def log_forward(self, method: str, target: str, status: int) -> None: ...
    def log_error(self, route: str, status: int, message: str) -> None: ...
