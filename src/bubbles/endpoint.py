# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Declarative endpoint definitions and the rules that turn them into operation names."""

from __future__ import annotations

import keyword
import re
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any

from .errors import ConfigurationError

_PLACEHOLDER_RE = re.compile(r"\{([^{}/]*)\}")
_NON_IDENTIFIER_RE = re.compile(r"[^0-9a-zA-Z_]+")


class HTTPMethod(str, Enum):
    """Supported HTTP methods for endpoints"""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"

    @classmethod
    def coerce(cls, value: HTTPMethod | str) -> HTTPMethod:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError as exc:
            raise ConfigurationError(f"Unsupported HTTP method {value!r}") from exc

    @property
    def allows_body(self) -> bool:
        return self in (HTTPMethod.POST, HTTPMethod.PUT, HTTPMethod.PATCH)


def location_placeholders(location: str) -> tuple[str, ...]:
    """Return ``{name}`` placeholders of a location template in declaration order."""
    names: list[str] = []
    for match in _PLACEHOLDER_RE.finditer(location):
        name = match.group(1)
        if not name.isidentifier() or keyword.iskeyword(name):
            raise ConfigurationError(f"Placeholder {{{name}}} in {location!r} is not a valid parameter name")
        if name in names:
            raise ConfigurationError(f"Placeholder {{{name}}} appears twice in {location!r}")
        names.append(name)
    return tuple(names)


def derive_name(location: str) -> str:
    """
    Turn a location into an operation name.

    Path separators split segments, placeholder braces are dropped (the name stays), runs of
    non-identifier characters become ``_``, segments are joined with ``_`` and lowercased:
    ``api/v1/user-info`` -> ``api_v1_user_info``, ``students/{id}/grades`` -> ``students_id_grades``.
    """
    parts: list[str] = []
    for segment in str(location).split("/"):
        segment = _PLACEHOLDER_RE.sub(r"\1", segment)
        cleaned = _NON_IDENTIFIER_RE.sub("_", segment).strip("_").lower()
        if cleaned:
            parts.append(cleaned)
    name = "_".join(parts)
    if not name:
        raise ConfigurationError(f"Cannot derive an operation name from location {location!r}")
    if name[0].isdigit():
        name = f"_{name}"
    if keyword.iskeyword(name):
        name = f"{name}_"
    return name


@dataclass(frozen=True)
class Endpoint:
    """One HTTP operation: method, location template and policy flags."""

    method: HTTPMethod
    location: str
    authenticated: bool = False
    api_key_required: bool = False
    name: str | None = None
    encode_authorization: tuple[str, ...] | None = None
    expect_json: bool = True
    placeholders: tuple[str, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", HTTPMethod.coerce(self.method))
        location = str(self.location or "").strip().lstrip("/")
        if not location:
            raise ConfigurationError("Endpoint location must not be empty")
        object.__setattr__(self, "location", location)
        if self.encode_authorization is not None:
            raw = self.encode_authorization
            encoded = (raw,) if isinstance(raw, str) else tuple(str(f) for f in raw)
            if not encoded:
                raise ConfigurationError(f"encode_authorization for {location!r} must list at least one field")
            if not self.method.allows_body:
                raise ConfigurationError(f"encode_authorization needs a method with a body, {location!r} uses {self.method.value}")
            object.__setattr__(self, "encode_authorization", encoded)
        if self.name is not None:
            name = str(self.name)
            if not name.isidentifier() or keyword.iskeyword(name):
                raise ConfigurationError(f"Endpoint name {name!r} is not a valid identifier")
            object.__setattr__(self, "name", name)
        object.__setattr__(self, "placeholders", location_placeholders(location))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Endpoint:
        """Build an endpoint from a plain mapping such as ``{"method": "get", "location": "version"}``."""
        allowed = {f.name for f in fields(cls) if f.init}
        unknown = set(data) - allowed
        if unknown:
            raise ConfigurationError(f"Unknown endpoint keys: {', '.join(sorted(map(str, unknown)))}")
        for required in ("method", "location"):
            if data.get(required) is None:
                raise ConfigurationError(f"Endpoint definition is missing {required!r}: {dict(data)!r}")
        return cls(**dict(data))

    @classmethod
    def coerce(cls, value: Endpoint | Mapping[str, Any]) -> Endpoint:
        if isinstance(value, Endpoint):
            return value
        if isinstance(value, Mapping):
            return cls.from_mapping(value)
        raise ConfigurationError(f"Endpoint definitions must be mappings, got {type(value).__name__}")

    @property
    def resolved_name(self) -> str:
        return self.name or derive_name(self.location)


__all__ = ["Endpoint", "HTTPMethod", "derive_name", "location_placeholders"]
