# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Attribute-accessible wrappers around decoded JSON responses."""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from typing import Any, NamedTuple

from .errors import DecodeError, FieldNotFoundError


class RawResponse(NamedTuple):
    """Status and body text for endpoints that do not expect JSON."""

    status_code: int
    body: str


class ResponseObject:
    """
    Read-only view over a decoded JSON object.

    Fields are reachable as attributes (``result.versionName``) or items
    (``result["user-id"]``). Nested objects and arrays are wrapped on the way in.
    """

    __slots__ = ("_data", "_status_code")

    def __init__(self, data: Mapping[str, Any], status_code: int | None = None):
        object.__setattr__(self, "_data", {str(k): wrap(v) for k, v in data.items()})
        object.__setattr__(self, "_status_code", status_code)

    def __getattribute__(self, name: str) -> Any:
        # JSON fields shadow the helper methods below.
        if not name.startswith("__") and name not in ResponseObject.__slots__:
            data = object.__getattribute__(self, "_data")
            if name in data:
                return data[name]
        return object.__getattribute__(self, name)

    def __getattr__(self, name: str) -> Any:
        if name in ResponseObject.__slots__ or (name.startswith("__") and name.endswith("__")):
            raise AttributeError(name)
        try:
            return self._data[name]
        except KeyError:
            raise FieldNotFoundError(name) from None

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is read-only")

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ResponseObject):
            return ResponseObject.to_dict(self) == ResponseObject.to_dict(other)
        if isinstance(other, Mapping):
            return ResponseObject.to_dict(self) == dict(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | {k for k in self._data if k.isidentifier()})

    def __repr__(self) -> str:
        return f"ResponseObject({ResponseObject.to_dict(self)!r})"

    def __reduce__(self):
        return (ResponseObject, (ResponseObject.to_dict(self), self._status_code))

    def get(self, name: str, default: Any = None) -> Any:
        """Field lookup with a default. Call as ``ResponseObject.get(obj, ...)`` when a field is named ``get``."""
        return self._data.get(name, default)

    def keys(self):
        return self._data.keys()

    def to_dict(self) -> dict[str, Any]:
        """Return the plain JSON value this object was built from."""
        return {k: unwrap(v) for k, v in self._data.items()}


class ResponseList(list):
    """List of wrapped JSON values; top-level lists also remember the HTTP status."""

    status_code: int | None = None

    def to_list(self) -> list[Any]:
        return [unwrap(v) for v in self]


def wrap(value: Any) -> Any:
    """Wrap decoded JSON so objects gain attribute access; scalars pass through."""
    if isinstance(value, Mapping):
        return ResponseObject(value)
    if isinstance(value, list):
        return ResponseList(wrap(v) for v in value)
    return value


def unwrap(value: Any) -> Any:
    if isinstance(value, ResponseObject):
        return ResponseObject.to_dict(value)
    if isinstance(value, ResponseList):
        return value.to_list()
    return value


def decode_json(body: str, status_code: int) -> Any:
    """
    Parse a JSON body into response objects tagged with ``status_code``.

    An empty body yields an empty ResponseObject so 204-style answers still carry a status.
    """
    if not body.strip():
        return ResponseObject({}, status_code=status_code)
    try:
        data = json.loads(body)
    except ValueError as exc:
        raise DecodeError(f"Response is not valid JSON: {exc}", status_code=status_code, body=body) from exc

    if isinstance(data, Mapping):
        return ResponseObject(data, status_code=status_code)
    if isinstance(data, list):
        result = wrap(data)
        result.status_code = status_code
        return result
    return data


def status_of(result: Any, default: int | None = None) -> int | None:
    """Return the HTTP status code a generated operation's result came with."""
    if isinstance(result, ResponseObject):
        status = object.__getattribute__(result, "_status_code")
        return default if status is None else status
    if isinstance(result, RawResponse):
        return result.status_code
    if isinstance(result, ResponseList) and result.status_code is not None:
        return result.status_code
    return default


__all__ = [
    "RawResponse",
    "ResponseList",
    "ResponseObject",
    "decode_json",
    "status_of",
    "unwrap",
    "wrap",
]
