# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

import socket
import ssl as ssl_module
from enum import Enum

import httpx


class ErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    SSL_ERROR = "SSL_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    BODY_TOO_LARGE = "BODY_TOO_LARGE"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class BubblesError(Exception):
    """Base class for every error raised by Bubbles."""


class ConfigurationError(BubblesError):
    """Endpoint or environment configuration cannot be used."""


class CallerError(BubblesError):
    """A generated operation was called with unusable arguments."""


class ArityError(CallerError, TypeError):
    """Argument count or names do not match the operation's parameters."""


class TransportError(BubblesError):
    """The HTTP transport failed before a response was received."""

    def __init__(self, message: str, *, category: ErrorCategory = ErrorCategory.UNKNOWN_ERROR, url: str | None = None):
        super().__init__(message)
        self.category = category
        self.url = url


class DecodeError(BubblesError):
    """A JSON endpoint answered with a body that is not valid JSON."""

    def __init__(self, message: str, *, status_code: int | None = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class FieldNotFoundError(BubblesError, AttributeError):
    """A response object has no field with the requested name."""

    def __init__(self, name: str):
        super().__init__(f"Response has no field {name!r}")
        self.field = name


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map Python/httpx exceptions to ErrorCategory.
    """
    if isinstance(exc, httpx.TimeoutException):
        return ErrorCategory.TIMEOUT

    # httpx wraps socket and TLS failures in ConnectError.
    cause = exc.__cause__ or exc.__context__
    if isinstance(exc, httpx.ConnectError) and isinstance(cause, (socket.gaierror, socket.herror)):
        return ErrorCategory.DNS_ERROR
    if isinstance(exc, httpx.ConnectError) and isinstance(cause, ssl_module.SSLError):
        return ErrorCategory.SSL_ERROR

    if isinstance(exc, (httpx.ConnectError, httpx.RemoteProtocolError, httpx.NetworkError, httpx.ProxyError)):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (ssl_module.SSLError, ssl_module.CertificateError)):
        return ErrorCategory.SSL_ERROR

    if isinstance(exc, (socket.gaierror, socket.herror)):
        return ErrorCategory.DNS_ERROR

    if isinstance(exc, (ConnectionError, ConnectionRefusedError, ConnectionResetError)):
        return ErrorCategory.CONNECTION_ERROR

    return ErrorCategory.UNKNOWN_ERROR


__all__ = [
    "ArityError",
    "BubblesError",
    "CallerError",
    "ConfigurationError",
    "DecodeError",
    "ErrorCategory",
    "FieldNotFoundError",
    "TransportError",
    "categorize_exception",
]
