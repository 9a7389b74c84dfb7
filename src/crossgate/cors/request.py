# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Per-request CORS context derived from the inbound headers."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from starlette.datastructures import Headers
from starlette.types import Scope

ORIGIN = "origin"
REQUEST_METHOD = "access-control-request-method"
REQUEST_HEADERS = "access-control-request-headers"


def parse_header_list(value: str | None) -> tuple[str, ...]:
    """Split a comma-separated header-name list into lower-cased names."""
    if not value:
        return ()
    return tuple(part.strip().lower() for part in value.split(",") if part.strip())


@dataclass(frozen=True)
class CORSRequest:
    """What the CORS rules need to know about one request.

    Never outlives the request it was built from.
    """

    method: str
    origin: str | None = None
    requested_method: str | None = None
    requested_headers: tuple[str, ...] = ()

    @property
    def is_cross_origin(self) -> bool:
        return self.origin is not None

    @property
    def is_preflight(self) -> bool:
        return self.method == "OPTIONS" and self.requested_method is not None

    @classmethod
    def from_headers(cls, method: str, headers: Mapping[str, str]) -> CORSRequest:
        """Build the context from a case-insensitive header mapping (e.g. Starlette ``Headers``)."""
        requested_method = headers.get(REQUEST_METHOD)
        return cls(
            method=method.upper(),
            origin=headers.get(ORIGIN),
            requested_method=requested_method.strip() if requested_method is not None else None,
            requested_headers=parse_header_list(headers.get(REQUEST_HEADERS)),
        )

    @classmethod
    def from_scope(cls, scope: Scope) -> CORSRequest:
        return cls.from_headers(scope.get("method", "GET"), Headers(scope=scope))
