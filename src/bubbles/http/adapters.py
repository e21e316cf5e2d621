# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""In-memory HttpClient used to drive generated operations without a network."""

from __future__ import annotations

import json
from typing import Any

from ..errors import TransportError
from .client import HttpClient
from .models import HttpRequest, HttpResponse


def json_response(payload: Any, status_code: int = 200) -> HttpResponse:
    """Build an HttpResponse carrying ``payload`` serialized as JSON."""
    return HttpResponse(
        status_code=status_code,
        headers={"content-type": "application/json"},
        content=json.dumps(payload).encode("utf-8"),
    )


class StubHttpClient(HttpClient):
    """Deterministic, programmable HttpClient for tests.

    Responses are keyed by ``(METHOD, url)``; a bare url key matches any method.
    Every request is recorded in ``requests``.
    """

    def __init__(self, responses: dict[Any, HttpResponse] | None = None):
        self._responses = dict(responses or {})
        self.requests: list[HttpRequest] = []
        self.closed = False

    def add(self, url: str, response: HttpResponse, method: str | None = None) -> None:
        key = (method.upper(), url) if method else url
        self._responses[key] = response

    def request(self, request: HttpRequest) -> HttpResponse:
        self.requests.append(request)
        for key in ((request.method.upper(), request.url), request.url):
            if key in self._responses:
                return self._responses[key]
        raise TransportError(f"No stubbed response configured for {request.method} {request.url}", url=request.url)

    def close(self) -> None:
        self.closed = True
