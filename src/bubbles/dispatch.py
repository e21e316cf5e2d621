# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Generated operations.

Each ``Endpoint`` becomes an ``Operation``: a callable bound to one environment whose
parameters follow a fixed order derived from the endpoint's flags:

1. ``auth_token`` when the endpoint is authenticated
2. ``api_key`` when an API key is required and no global key is configured
3. ``credentials`` when the endpoint encodes authorization fields into the body
4. one parameter per ``{placeholder}`` in the location, in declaration order

Arguments are checked against that contract before the transport is touched.
"""

from __future__ import annotations

import inspect
import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote, urlencode

from .errors import ArityError, CallerError, ConfigurationError, DecodeError, ErrorCategory, TransportError
from .endpoint import Endpoint
from .http.client import HttpClient
from .http.models import HttpRequest, HttpResponse
from .response import RawResponse, decode_json

logger = logging.getLogger(__name__)

AUTH_TOKEN = "auth_token"
API_KEY = "api_key"
CREDENTIALS = "credentials"
QUERY = "query"
BODY = "body"
_RESERVED_PARAMETERS = {AUTH_TOKEN, API_KEY, CREDENTIALS, QUERY, BODY}


@dataclass(frozen=True)
class HeaderPolicy:
    """Header names used to carry credentials."""

    auth_header: str = "Authorization"
    auth_scheme: str = "Bearer"
    api_key_header: str = "X-API-Key"

    def auth_value(self, token: str) -> str:
        return f"{self.auth_scheme} {token}" if self.auth_scheme else token


class Operation:
    """A callable HTTP operation generated from one endpoint for one environment."""

    def __init__(
        self,
        endpoint: Endpoint,
        *,
        base_url: str,
        http_client: HttpClient,
        api_key: str | None = None,
        header_policy: HeaderPolicy | None = None,
    ):
        self.endpoint = endpoint
        self.name = endpoint.resolved_name
        self.base_url = base_url.rstrip("/")
        self.http_client = http_client
        self.header_policy = header_policy or HeaderPolicy()
        self._global_api_key = api_key
        self.parameters = self._parameter_names()
        self.__signature__ = self._build_signature()
        self.__name__ = self.name
        self.__doc__ = f"{endpoint.method.value} /{endpoint.location}"

    def _parameter_names(self) -> tuple[str, ...]:
        endpoint = self.endpoint
        names: list[str] = []
        if endpoint.authenticated:
            names.append(AUTH_TOKEN)
        if endpoint.api_key_required and not self._global_api_key:
            names.append(API_KEY)
        if endpoint.encode_authorization:
            names.append(CREDENTIALS)
        clashing = _RESERVED_PARAMETERS.intersection(endpoint.placeholders)
        if clashing:
            raise ConfigurationError(
                f"Placeholder name(s) {', '.join(sorted(clashing))} in {endpoint.location!r} are reserved"
            )
        names.extend(endpoint.placeholders)
        return tuple(names)

    @property
    def accepts_body(self) -> bool:
        return self.endpoint.method.allows_body and not self.endpoint.encode_authorization

    def _build_signature(self) -> inspect.Signature:
        params = [inspect.Parameter(name, inspect.Parameter.POSITIONAL_OR_KEYWORD) for name in self.parameters]
        params.append(inspect.Parameter(QUERY, inspect.Parameter.KEYWORD_ONLY, default=None))
        if self.accepts_body:
            params.append(inspect.Parameter(BODY, inspect.Parameter.KEYWORD_ONLY, default=None))
        return inspect.Signature(params)

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        try:
            bound = self.__signature__.bind(*args, **kwargs)
        except TypeError as exc:
            expected = ", ".join(self.parameters) or "no arguments"
            raise ArityError(f"{self.name}() expects ({expected}): {exc}") from None
        bound.apply_defaults()
        request = self.build_request(bound.arguments)
        return self.send(request)

    def build_request(self, arguments: Mapping[str, Any]) -> HttpRequest:
        """Turn bound call arguments into an HttpRequest without sending it."""
        endpoint = self.endpoint
        headers: dict[str, str] = {}
        if endpoint.expect_json:
            headers["Accept"] = "application/json"

        if endpoint.authenticated:
            token = _require_text(arguments[AUTH_TOKEN], AUTH_TOKEN, self.name)
            headers[self.header_policy.auth_header] = self.header_policy.auth_value(token)

        if endpoint.api_key_required:
            if API_KEY in self.parameters:
                api_key = _require_text(arguments[API_KEY], API_KEY, self.name)
            else:
                api_key = str(self._global_api_key)
            headers[self.header_policy.api_key_header] = api_key

        payload: Any = None
        if endpoint.encode_authorization:
            payload = _encode_credentials(arguments[CREDENTIALS], endpoint.encode_authorization, self.name)
        elif arguments.get(BODY) is not None:
            payload = arguments[BODY]
            if not isinstance(payload, (Mapping, list)):
                raise CallerError(f"{self.name}() body must be a mapping or list, got {type(payload).__name__}")

        body: str | None = None
        if payload is not None:
            body = json.dumps(dict(payload) if isinstance(payload, Mapping) else payload)
            headers["Content-Type"] = "application/json"

        url = f"{self.base_url}/{self._resolve_location(arguments)}"
        query = arguments.get(QUERY)
        if query:
            if not isinstance(query, Mapping):
                raise CallerError(f"{self.name}() query must be a mapping, got {type(query).__name__}")
            separator = "&" if "?" in url else "?"
            url = f"{url}{separator}{urlencode(list(_query_items(query)))}"

        return HttpRequest(url=url, method=endpoint.method.value, headers=headers, body=body)

    def _resolve_location(self, arguments: Mapping[str, Any]) -> str:
        location = self.endpoint.location
        for name in self.endpoint.placeholders:
            value = arguments[name]
            if value is None or (isinstance(value, str) and not value):
                raise CallerError(f"{self.name}() path parameter {name!r} must not be empty")
            location = location.replace(f"{{{name}}}", quote(str(value), safe=""))
        return location

    def send(self, request: HttpRequest) -> Any:
        logger.debug("%s %s -> %s", self.name, request.method, request.url)
        response = self.http_client.request(request)
        if response.truncated:
            raise TransportError(
                f"Response body from {request.url} exceeded the configured size limit",
                category=ErrorCategory.BODY_TOO_LARGE,
                url=request.url,
            )
        if not response.ok:
            logger.warning("%s %s returned HTTP %s", request.method, request.url, response.status_code)
        return self.decode(response)

    def decode(self, response: HttpResponse) -> Any:
        if not self.endpoint.expect_json:
            return RawResponse(response.status_code, response.text)
        try:
            return decode_json(response.text, response.status_code)
        except DecodeError:
            logger.debug("%s: undecodable body (HTTP %s)", self.name, response.status_code)
            raise

    def __repr__(self) -> str:
        return f"<Operation {self.name}({', '.join(self.parameters)}) {self.endpoint.method.value} {self.base_url}/{self.endpoint.location}>"


def _require_text(value: Any, name: str, operation: str) -> str:
    if not isinstance(value, str) or not value:
        raise CallerError(f"{operation}() {name} must be a non-empty string")
    return value


def _encode_credentials(credentials: Any, fields: Iterable[str], operation: str) -> dict[str, Any]:
    if not isinstance(credentials, Mapping):
        raise CallerError(f"{operation}() credentials must be a mapping, got {type(credentials).__name__}")
    fields = tuple(fields)
    missing = [f for f in fields if f not in credentials]
    if missing:
        raise CallerError(f"{operation}() credentials are missing: {', '.join(missing)}")
    return {f: credentials[f] for f in fields}


def _query_items(query: Mapping[str, Any]) -> Iterable[tuple[str, str]]:
    for key, value in query.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            for item in value:
                yield str(key), _query_text(item)
        else:
            yield str(key), _query_text(value)


def _query_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_operations(
    endpoints: Iterable[Endpoint],
    *,
    base_url: str,
    http_client: HttpClient,
    api_key: str | None = None,
    header_policy: HeaderPolicy | None = None,
    reserved_names: Iterable[str] = (),
) -> dict[str, Operation]:
    """Generate one operation per endpoint, keyed by resolved name."""
    reserved = set(reserved_names)
    operations: dict[str, Operation] = {}
    for endpoint in endpoints:
        operation = Operation(
            endpoint,
            base_url=base_url,
            http_client=http_client,
            api_key=api_key,
            header_policy=header_policy,
        )
        if operation.name in operations:
            raise ConfigurationError(
                f"Operation name {operation.name!r} is generated by more than one endpoint "
                f"({operations[operation.name].endpoint.location!r} and {endpoint.location!r})"
            )
        if operation.name in reserved:
            raise ConfigurationError(f"Operation name {operation.name!r} is reserved by the environment binding")
        operations[operation.name] = operation
    return operations


__all__ = ["HeaderPolicy", "Operation", "build_operations"]
