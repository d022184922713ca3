"""Configuration models and loading."""

import os
from collections.abc import Mapping

import httpx
from pydantic import BaseModel, Field, ValidationError

from core.exceptions import ConfigurationError

UPSTREAM_BASE_ENV = "UPSTREAM_BASE"

# Environment variable -> (section, field)
ENV_SETTINGS = {
    UPSTREAM_BASE_ENV: ("upstream", "base_url"),
    "UPSTREAM_TIMEOUT": ("upstream", "timeout"),
    "RELAY_HOST": ("proxy", "host"),
    "RELAY_PORT": ("proxy", "port"),
    "RELAY_DEBUG": ("proxy", "debug"),
}


class ProxySettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8080
    debug: bool = False


class UpstreamSettings(BaseModel):
    base_url: str = ""
    timeout: float = 300.0


class LimitsSettings(BaseModel):
    max_connections: int = 100
    max_keepalive_connections: int = 20
    keep_alive_timeout: int = 5


class Config(BaseModel):
    proxy: ProxySettings = Field(default_factory=ProxySettings)
    upstream: UpstreamSettings = Field(default_factory=UpstreamSettings)
    limits: LimitsSettings = Field(default_factory=LimitsSettings)


def load_config(environ: Mapping[str, str] | None = None) -> Config:
    """Load configuration from environment variables.

    A missing UPSTREAM_BASE is not an error here; it is reported per request
    by resolve_upstream_base() so the process keeps serving.
    """
    environ = os.environ if environ is None else environ
    data: dict[str, dict[str, str]] = {}
    for name, (section, field) in ENV_SETTINGS.items():
        value = environ.get(name)
        if value is not None and (value.strip() or name == UPSTREAM_BASE_ENV):
            data.setdefault(section, {})[field] = value

    try:
        return Config.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid environment configuration: {e}") from e


def resolve_upstream_base(config: Config) -> httpx.URL:
    """Return the configured upstream base as a URL, or raise ConfigurationError."""
    raw = config.upstream.base_url.strip()
    if not raw:
        raise ConfigurationError(f"Missing {UPSTREAM_BASE_ENV}", setting=UPSTREAM_BASE_ENV)

    try:
        url = httpx.URL(raw)
    except httpx.InvalidURL as e:
        raise ConfigurationError(
            f"Invalid {UPSTREAM_BASE_ENV}: {e}", setting=UPSTREAM_BASE_ENV
        ) from e

    if url.scheme not in ("http", "https") or not url.host:
        raise ConfigurationError(
            f"Invalid {UPSTREAM_BASE_ENV}: expected an absolute http(s) URL",
            setting=UPSTREAM_BASE_ENV,
        )
    return url
