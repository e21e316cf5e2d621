# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP request/response data models exchanged with HttpClient implementations."""

from __future__ import annotations

from dataclasses import dataclass, field

Headers = dict[str, str]


@dataclass
class HttpRequest:
    """Normalized request representation consumed by HttpClient implementations."""

    url: str
    method: str = "GET"
    headers: Headers = field(default_factory=dict)
    body: bytes | str | None = None
    timeout: float | None = None


@dataclass
class HttpResponse:
    """Status, headers and raw body of a completed HTTP exchange."""

    status_code: int
    headers: Headers = field(default_factory=dict)
    content: bytes = b""
    encoding: str = "utf-8"
    url: str | None = None
    truncated: bool = False

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        try:
            return self.content.decode(self.encoding, errors="replace")
        except LookupError:
            return self.content.decode("utf-8", errors="replace")
