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
"""CORS header decisions.

:func:`evaluate` turns a policy and a request context into the exact set
of response headers to emit.  It is pure: no I/O, no shared state, and no
request input makes it raise.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

import structlog

from crossgate.cors.policy import CORSPolicy
from crossgate.cors.request import CORSRequest

logger = structlog.get_logger("crossgate.cors")

ALLOW_ORIGIN = "Access-Control-Allow-Origin"
ALLOW_METHODS = "Access-Control-Allow-Methods"
ALLOW_HEADERS = "Access-Control-Allow-Headers"
ALLOW_CREDENTIALS = "Access-Control-Allow-Credentials"
MAX_AGE = "Access-Control-Max-Age"
EXPOSE_HEADERS = "Access-Control-Expose-Headers"
VARY = "Vary"

_PREFLIGHT_VARY = ("Origin", "Access-Control-Request-Method", "Access-Control-Request-Headers")
_ACTUAL_VARY = ("Origin",)


class RequestKind(enum.Enum):
    SAME_ORIGIN = "same_origin"
    PREFLIGHT = "preflight"
    ACTUAL = "actual"


@dataclass(frozen=True)
class CORSDecision:
    """Headers to emit for one request.

    ``method_allowed`` and ``headers_allowed`` are diagnostics only: the
    preflight response always carries the full configured allow-sets and
    the browser rejects mismatches itself.
    """

    kind: RequestKind
    allow_origin: str | None = None
    headers: tuple[tuple[str, str], ...] = ()
    vary: tuple[str, ...] = ()
    method_allowed: bool = True
    headers_allowed: bool = True

    @property
    def is_preflight(self) -> bool:
        return self.kind is RequestKind.PREFLIGHT

    @property
    def passes_through(self) -> bool:
        return self.kind is RequestKind.SAME_ORIGIN

    def as_dict(self) -> dict[str, str]:
        result = dict(self.headers)
        if self.vary:
            result[VARY] = ", ".join(self.vary)
        return result


_SAME_ORIGIN = CORSDecision(kind=RequestKind.SAME_ORIGIN)


def merge_vary(existing: str | None, additions: tuple[str, ...]) -> str:
    """Append *additions* to an existing ``Vary`` value, skipping duplicates."""
    values = [v.strip() for v in (existing or "").split(",") if v.strip()]
    if "*" in values:
        return "*"
    seen = {v.lower() for v in values}
    for name in additions:
        if name.lower() not in seen:
            values.append(name)
            seen.add(name.lower())
    return ", ".join(values)


def evaluate(policy: CORSPolicy, request: CORSRequest) -> CORSDecision:
    """Decide which CORS headers *request* gets under *policy*."""
    if request.origin is None:
        return _SAME_ORIGIN

    allow_origin = policy.match_origin(request.origin)

    if request.is_preflight:
        return _preflight(policy, request, allow_origin)
    return _actual(policy, request, allow_origin)


def _preflight(policy: CORSPolicy, request: CORSRequest, allow_origin: str | None) -> CORSDecision:
    method_allowed = policy.is_method_allowed(request.requested_method)
    headers_allowed = policy.are_headers_allowed(request.requested_headers)

    logger.debug(
        "cors_preflight",
        origin=request.origin,
        origin_allowed=allow_origin is not None,
        requested_method=request.requested_method,
        requested_headers=list(request.requested_headers),
        method_allowed=method_allowed,
        headers_allowed=headers_allowed,
    )

    # Only Allow-Origin depends on the origin; the rest always reflects the policy.
    headers = _allow_origin(allow_origin)
    headers.append((ALLOW_METHODS, policy.allow_methods_value))
    if policy.allowed_headers:
        headers.append((ALLOW_HEADERS, policy.allow_headers_value))
    if policy.allow_credentials:
        headers.append((ALLOW_CREDENTIALS, "true"))
    if policy.max_age is not None:
        headers.append((MAX_AGE, str(policy.max_age)))

    return CORSDecision(
        kind=RequestKind.PREFLIGHT,
        allow_origin=allow_origin,
        headers=tuple(headers),
        vary=_PREFLIGHT_VARY if policy.varies_by_origin else (),
        method_allowed=method_allowed,
        headers_allowed=headers_allowed,
    )


def _actual(policy: CORSPolicy, request: CORSRequest, allow_origin: str | None) -> CORSDecision:
    if allow_origin is None:
        logger.debug("cors_origin_rejected", origin=request.origin, method=request.method)

    headers = _allow_origin(allow_origin)
    if policy.allow_credentials:
        headers.append((ALLOW_CREDENTIALS, "true"))
    if policy.exposed_headers:
        headers.append((EXPOSE_HEADERS, policy.expose_headers_value))

    return CORSDecision(
        kind=RequestKind.ACTUAL,
        allow_origin=allow_origin,
        headers=tuple(headers),
        vary=_ACTUAL_VARY if policy.varies_by_origin else (),
    )


def _allow_origin(allow_origin: str | None) -> list[tuple[str, str]]:
    return [] if allow_origin is None else [(ALLOW_ORIGIN, allow_origin)]
