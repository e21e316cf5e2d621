# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Bubbles package entrypoint.

Bubbles turns a declarative list of REST endpoints into callable operations bound to a
local, staging or production environment. HTTP behavior is abstracted behind an injectable
client interface, and JSON responses come back as attribute-accessible objects.
"""

from .config import (
    Configuration,
    EnvironmentSettings,
    HttpSettings,
    configure,
    get_configuration,
    load_http_settings,
    reset_configuration,
)
from .dispatch import HeaderPolicy, Operation
from .endpoint import Endpoint, HTTPMethod
from .errors import (
    ArityError,
    BubblesError,
    CallerError,
    ConfigurationError,
    DecodeError,
    ErrorCategory,
    FieldNotFoundError,
    TransportError,
)
from .http import (
    HttpClient,
    HttpRequest,
    HttpResponse,
    HttpxClient,
    StubHttpClient,
    create_default_http_client,
)
from .log import setup_logging
from .resources import EnvironmentBinding, Resources
from .response import RawResponse, ResponseList, ResponseObject, status_of
from .version import __version__

__all__ = [
    "ArityError",
    "BubblesError",
    "CallerError",
    "Configuration",
    "ConfigurationError",
    "DecodeError",
    "Endpoint",
    "EnvironmentBinding",
    "EnvironmentSettings",
    "ErrorCategory",
    "FieldNotFoundError",
    "HTTPMethod",
    "HeaderPolicy",
    "HttpClient",
    "HttpRequest",
    "HttpResponse",
    "HttpSettings",
    "HttpxClient",
    "Operation",
    "RawResponse",
    "Resources",
    "ResponseList",
    "ResponseObject",
    "StubHttpClient",
    "TransportError",
    "configure",
    "create_default_http_client",
    "get_configuration",
    "load_http_settings",
    "reset_configuration",
    "setup_logging",
    "status_of",
    "__version__",
]
