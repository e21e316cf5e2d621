# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Configuration for Bubbles.

Two layers live here:

- ``HttpSettings``: transport defaults read from ``BUBBLES_*`` environment variables.
- ``Configuration``: the endpoint list, per-environment connection settings and the optional
  global API key. A process-wide instance is exposed through ``configure()``; an explicit
  instance may also be handed to ``Resources`` directly.

The process-wide store is meant to be written once during setup. Concurrent ``configure()``
calls from several threads need external synchronization.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from .errors import ConfigurationError
from .version import __version__

DEFAULT_USER_AGENT = f"Bubbles/{__version__}"
ENVIRONMENT_NAMES = ("local", "staging", "production")


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class HttpSettings:
    """HTTP transport defaults."""

    timeout: float = 10.0
    user_agent: str = DEFAULT_USER_AGENT
    allow_redirects: bool = True
    verify_ssl: bool = True
    max_body_bytes: int = 16 * 1024 * 1024

    @classmethod
    def from_env(cls) -> "HttpSettings":
        """Create settings from environment variables (evaluated at call time)."""
        max_body_bytes = _int_env("BUBBLES_HTTP_MAX_BODY_BYTES", cls.max_body_bytes)
        if max_body_bytes <= 0:
            max_body_bytes = cls.max_body_bytes
        return cls(
            timeout=_float_env("BUBBLES_HTTP_TIMEOUT", cls.timeout),
            user_agent=os.getenv("BUBBLES_USER_AGENT", cls.user_agent),
            allow_redirects=_bool_env("BUBBLES_HTTP_REDIRECTS", cls.allow_redirects),
            verify_ssl=_bool_env("BUBBLES_HTTP_VERIFY_SSL", cls.verify_ssl),
            max_body_bytes=max_body_bytes,
        )


def load_http_settings() -> HttpSettings:
    """Load HTTP settings from environment with sensible defaults."""
    return HttpSettings.from_env()


@dataclass(frozen=True)
class EnvironmentSettings:
    """Where one deployment target lives."""

    scheme: str
    host: str
    port: int | str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> EnvironmentSettings:
        unknown = set(data) - {"scheme", "host", "port"}
        if unknown:
            raise ConfigurationError(f"Unknown environment settings: {', '.join(sorted(unknown))}")
        return cls(scheme=data.get("scheme") or "", host=data.get("host") or "", port=data.get("port"))

    @classmethod
    def coerce(cls, value: EnvironmentSettings | Mapping[str, Any]) -> EnvironmentSettings:
        if isinstance(value, EnvironmentSettings):
            return value
        if isinstance(value, Mapping):
            return cls.from_mapping(value)
        raise ConfigurationError(f"Environment settings must be a mapping, got {type(value).__name__}")

    def validate(self) -> None:
        if not self.scheme:
            raise ConfigurationError("Environment settings are missing a scheme")
        if not self.host:
            raise ConfigurationError("Environment settings are missing a host")
        if self.port not in (None, ""):
            try:
                int(self.port)
            except (TypeError, ValueError) as exc:
                raise ConfigurationError(f"Environment port {self.port!r} is not a number") from exc

    @property
    def base_url(self) -> str:
        """``scheme://host[:port]`` without a trailing slash."""
        scheme = str(self.scheme).lower().rstrip(":/")
        host = str(self.host).strip("/")
        if self.port in (None, ""):
            return f"{scheme}://{host}"
        return f"{scheme}://{host}:{int(self.port)}"


@dataclass
class Configuration:
    """Endpoint definitions plus connection settings for each environment.

    No validation happens on assignment; problems surface when ``Resources`` is built.
    """

    endpoints: list[Any] = field(default_factory=list)
    local_environment: EnvironmentSettings | Mapping[str, Any] | None = None
    staging_environment: EnvironmentSettings | Mapping[str, Any] | None = None
    production_environment: EnvironmentSettings | Mapping[str, Any] | None = None
    api_key: str | None = None
    auth_header: str = "Authorization"
    auth_scheme: str = "Bearer"
    api_key_header: str = "X-API-Key"

    def environment_settings(self, name: str) -> EnvironmentSettings | Mapping[str, Any] | None:
        if name not in ENVIRONMENT_NAMES:
            raise ConfigurationError(f"Unknown environment {name!r}; expected one of {', '.join(ENVIRONMENT_NAMES)}")
        return getattr(self, f"{name}_environment")


_configuration = Configuration()


def get_configuration() -> Configuration:
    """Return the live process-wide configuration."""
    return _configuration


def configure(mutator: Callable[[Configuration], Any]) -> Configuration:
    """
    Apply ``mutator`` to the process-wide configuration and return it.

    Assigned fields replace what was there before. Works as a decorator too::

        @bubbles.configure
        def _(config):
            config.endpoints = [...]
    """
    mutator(_configuration)
    return _configuration


def reset_configuration() -> Configuration:
    """Replace the process-wide configuration with an empty one."""
    global _configuration
    _configuration = Configuration()
    return _configuration


__all__ = [
    "Configuration",
    "DEFAULT_USER_AGENT",
    "ENVIRONMENT_NAMES",
    "EnvironmentSettings",
    "HttpSettings",
    "configure",
    "get_configuration",
    "load_http_settings",
    "reset_configuration",
]
