"""Custom exception hierarchy for the privacy relay."""


class ProxyError(Exception):
    """Base exception for all proxy errors."""


class ConfigurationError(ProxyError):
    """Raised when configuration is missing or invalid.

    Attributes:
        message: Error message, safe to show to the caller
        setting: Name of the offending setting (e.g., 'UPSTREAM_BASE')
    """

    def __init__(self, message: str, setting: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.setting = setting


class UpstreamUnavailable(ProxyError):
    """Raised when the exchange with the upstream could not be completed.

    Covers connect failures, DNS, TLS, timeouts and transport resets.
    """

    def __init__(self, reason: str | None = None) -> None:
        super().__init__(reason or "")
        self.reason = reason or "upstream request failed"
