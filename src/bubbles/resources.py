# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Environment bindings and the ``Resources`` root that builds them from configuration."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from contextlib import suppress
from types import MappingProxyType
from typing import Any

from .config import ENVIRONMENT_NAMES, Configuration, EnvironmentSettings, get_configuration, load_http_settings
from .dispatch import HeaderPolicy, Operation, build_operations
from .endpoint import Endpoint
from .errors import ConfigurationError
from .http.client import HttpClient, create_default_http_client

logger = logging.getLogger(__name__)


class EnvironmentBinding:
    """
    Operations for every configured endpoint, bound to one environment.

    Operations are reachable as attributes (``binding.list_students(token)``) or through
    ``invoke("list_students", token)``.
    """

    def __init__(
        self,
        name: str,
        settings: EnvironmentSettings,
        endpoints: Iterable[Endpoint],
        *,
        http_client: HttpClient,
        api_key: str | None = None,
        header_policy: HeaderPolicy | None = None,
    ):
        settings.validate()
        self.name = name
        self.settings = settings
        self.http_client = http_client
        self._operations = build_operations(
            endpoints,
            base_url=settings.base_url,
            http_client=http_client,
            api_key=api_key,
            header_policy=header_policy,
            reserved_names=_reserved_binding_names(),
        )
        logger.debug("Bound %d operation(s) to %s (%s)", len(self._operations), name, self.base_url)

    @property
    def base_url(self) -> str:
        return self.settings.base_url

    @property
    def operations(self) -> Mapping[str, Operation]:
        return MappingProxyType(self._operations)

    def invoke(self, name: str, *args: Any, **kwargs: Any) -> Any:
        """Call the operation registered under ``name``."""
        try:
            operation = self._operations[name]
        except KeyError:
            raise ConfigurationError(f"No operation named {name!r} in the {self.name} environment") from None
        return operation(*args, **kwargs)

    def __getattr__(self, name: str) -> Operation:
        operations = self.__dict__.get("_operations")
        if operations is not None and name in operations:
            return operations[name]
        raise AttributeError(f"{type(self).__name__} {self.__dict__.get('name', '?')!r} has no operation {name!r}")

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(self._operations))

    def __repr__(self) -> str:
        return f"<EnvironmentBinding {self.name} {self.base_url} operations={sorted(self._operations)}>"


def _reserved_binding_names() -> set[str]:
    public = {attr for attr in dir(EnvironmentBinding) if not attr.startswith("_")}
    return public | {"name", "settings", "http_client"}


class Resources:
    """
    Root object: snapshots a configuration and builds one binding per configured environment.

    Later changes to the configuration do not reach an existing ``Resources``; build a new one.
    """

    def __init__(self, config: Configuration | None = None, http_client: HttpClient | None = None):
        config = config if config is not None else get_configuration()
        self.endpoints = tuple(Endpoint.coerce(e) for e in (config.endpoints or ()))
        if not self.endpoints:
            raise ConfigurationError("No endpoints configured")

        self._owns_client = http_client is None
        self.http_client = http_client or create_default_http_client(load_http_settings())
        header_policy = HeaderPolicy(
            auth_header=config.auth_header,
            auth_scheme=config.auth_scheme,
            api_key_header=config.api_key_header,
        )

        self._bindings: dict[str, EnvironmentBinding] = {}
        try:
            self._bind_environments(config, header_policy)
        except BaseException:
            self.close()
            raise
        if not self._bindings:
            logger.warning("Resources built without any environment settings")

    def _bind_environments(self, config: Configuration, header_policy: HeaderPolicy) -> None:
        for env_name in ENVIRONMENT_NAMES:
            raw_settings = config.environment_settings(env_name)
            if raw_settings is None:
                continue
            self._bindings[env_name] = EnvironmentBinding(
                env_name,
                EnvironmentSettings.coerce(raw_settings),
                self.endpoints,
                http_client=self.http_client,
                api_key=config.api_key,
                header_policy=header_policy,
            )

    def environment(self, name: str) -> EnvironmentBinding:
        """Return the binding for ``local``, ``staging`` or ``production``."""
        if name not in ENVIRONMENT_NAMES:
            raise ConfigurationError(f"Unknown environment {name!r}; expected one of {', '.join(ENVIRONMENT_NAMES)}")
        try:
            return self._bindings[name]
        except KeyError:
            raise ConfigurationError(f"No settings configured for the {name} environment") from None

    @property
    def environments(self) -> Mapping[str, EnvironmentBinding]:
        return MappingProxyType(self._bindings)

    @property
    def local_environment(self) -> EnvironmentBinding:
        return self.environment("local")

    @property
    def staging_environment(self) -> EnvironmentBinding:
        return self.environment("staging")

    @property
    def production_environment(self) -> EnvironmentBinding:
        return self.environment("production")

    def close(self) -> None:
        if not self._owns_client:
            return
        with suppress(Exception):
            if hasattr(self.http_client, "close"):
                self.http_client.close()

    def __enter__(self) -> Resources:
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:  # noqa: ANN001
        self.close()


__all__ = ["EnvironmentBinding", "Resources"]
