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
"""CORS policy — the immutable origin/method/header/credentials rule set.

A :class:`CORSPolicy` is built once and then shared by every request
without locking.  All normalisation and validation happens in the
constructor, so a policy that exists is a policy the protocol accepts.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import timedelta
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

import structlog

from crossgate.kernel.exceptions import (
    CREDENTIALS_WITH_WILDCARD,
    INVALID_MAX_AGE,
    INVALID_ORIGIN,
    INVALID_TOKEN,
    InvalidCORSPolicyException,
)

if TYPE_CHECKING:
    from crossgate.core.config import Config
    from crossgate.cors.properties import CORSProperties

logger = structlog.get_logger("crossgate.cors")

WILDCARD = "*"
NULL_ORIGIN = "null"

DEFAULT_METHODS: tuple[str, ...] = ("GET", "HEAD", "POST")

OriginPredicate = Callable[[str], bool]
OriginsSpec = str | Iterable[str] | OriginPredicate


def _dedupe(values: Iterable[str]) -> tuple[str, ...]:
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return tuple(result)


def _as_tokens(values: str | Iterable[str] | None, what: str) -> tuple[str, ...]:
    """Normalise a header/method list, rejecting empty tokens."""
    if values is None:
        return ()
    if isinstance(values, str):
        values = [values]
    tokens = []
    for raw in values:
        token = str(raw).strip()
        if not token or any(c.isspace() or c == "," for c in token):
            raise InvalidCORSPolicyException(
                f"Invalid {what} token {raw!r}",
                code=INVALID_TOKEN,
                context={"kind": what, "value": raw},
            )
        tokens.append(token)
    return tuple(tokens)


def _validate_origin(origin: str) -> str:
    if origin in (WILDCARD, NULL_ORIGIN):
        return origin
    parts = urlsplit(origin)
    try:
        parts.port
    except ValueError:
        valid = False
    else:
        valid = bool(parts.scheme and parts.hostname) and not (parts.path or parts.query or parts.fragment)
    if not valid:
        raise InvalidCORSPolicyException(
            f"Invalid origin {origin!r}: expected scheme://host[:port] with no path",
            code=INVALID_ORIGIN,
            context={"origin": origin},
        )
    return origin


def _as_origins(origins: OriginsSpec | None) -> frozenset[str] | OriginPredicate:
    if origins is None:
        return frozenset()
    if isinstance(origins, str):
        return frozenset({_validate_origin(origins.strip())})
    if callable(origins):
        return origins
    return frozenset(_validate_origin(str(o).strip()) for o in origins)


def _as_max_age(max_age: int | timedelta | None) -> int | None:
    if max_age is None:
        return None
    seconds = int(max_age.total_seconds()) if isinstance(max_age, timedelta) else int(max_age)
    if seconds < 0:
        raise InvalidCORSPolicyException(
            f"max_age must be non-negative, got {seconds}",
            code=INVALID_MAX_AGE,
            context={"max_age": seconds},
        )
    return seconds


@dataclass(frozen=True)
class CORSPolicy:
    """Read-only CORS rule set.

    Args:
        allowed_origins: Exact origins, the ``"*"`` wildcard marker (alone or
            inside a collection), or a predicate ``origin -> bool``.
        allowed_methods: Method tokens; upper-cased and de-duplicated in order.
        allowed_headers: Header names; membership checks ignore case.
        allow_credentials: Send ``Access-Control-Allow-Credentials: true``.
            Cannot be combined with a wildcard origin.
        max_age: Preflight cache lifetime, in seconds or as a ``timedelta``.
        exposed_headers: Response headers readable by client-side script.

    Raises:
        InvalidCORSPolicyException: On any combination the protocol forbids.
    """

    allowed_origins: OriginsSpec = frozenset()
    allowed_methods: str | Iterable[str] = DEFAULT_METHODS
    allowed_headers: str | Iterable[str] = ()
    allow_credentials: bool = False
    max_age: int | timedelta | None = None
    exposed_headers: str | Iterable[str] = ()

    _header_keys: frozenset[str] = field(init=False, repr=False, compare=False)
    _allow_methods_value: str = field(init=False, repr=False, compare=False)
    _allow_headers_value: str = field(init=False, repr=False, compare=False)
    _expose_headers_value: str = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        origins = _as_origins(self.allowed_origins)
        methods = _dedupe(m.upper() for m in _as_tokens(self.allowed_methods, "method"))
        headers = _dedupe(_as_tokens(self.allowed_headers, "header"))
        exposed = _dedupe(_as_tokens(self.exposed_headers, "header"))

        object.__setattr__(self, "allowed_origins", origins)
        object.__setattr__(self, "allowed_methods", methods)
        object.__setattr__(self, "allowed_headers", headers)
        object.__setattr__(self, "allow_credentials", bool(self.allow_credentials))
        object.__setattr__(self, "max_age", _as_max_age(self.max_age))
        object.__setattr__(self, "exposed_headers", exposed)

        if self.allow_credentials and self.allows_any_origin:
            raise InvalidCORSPolicyException(
                "allow_credentials=True cannot be combined with a wildcard origin; "
                "list the trusted origins explicitly",
                code=CREDENTIALS_WITH_WILDCARD,
            )

        object.__setattr__(self, "_header_keys", frozenset(h.lower() for h in headers))
        object.__setattr__(self, "_allow_methods_value", ", ".join(methods))
        object.__setattr__(self, "_allow_headers_value", ", ".join(headers))
        object.__setattr__(self, "_expose_headers_value", ", ".join(exposed))

    # ------------------------------------------------------------------
    # Construction from configuration
    # ------------------------------------------------------------------

    @classmethod
    def from_properties(cls, props: CORSProperties) -> CORSPolicy:
        """Build a validated policy from bound :class:`CORSProperties`."""
        return cls(
            allowed_origins=props.allowed_origins,
            allowed_methods=props.allowed_methods,
            allowed_headers=props.allowed_headers,
            allow_credentials=props.allow_credentials,
            max_age=props.max_age,
            exposed_headers=props.exposed_headers,
        )

    @classmethod
    def from_config(cls, config: Config) -> CORSPolicy:
        """Build a policy from the ``crossgate.cors`` section, env overrides included."""
        from crossgate.cors.properties import CORSProperties

        policy = cls.from_properties(CORSProperties.from_config(config))
        logger.info(
            "cors_policy_created",
            origins=policy.describe_origins(),
            methods=policy.allow_methods_value,
            headers=policy.allow_headers_value,
            allow_credentials=policy.allow_credentials,
            max_age=policy.max_age,
        )
        return policy

    # ------------------------------------------------------------------
    # PolicySource
    # ------------------------------------------------------------------

    @property
    def current(self) -> CORSPolicy:
        """A policy is its own (static) policy source."""
        return self

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------

    @property
    def allows_any_origin(self) -> bool:
        return not callable(self.allowed_origins) and WILDCARD in self.allowed_origins

    @property
    def varies_by_origin(self) -> bool:
        """Whether the emitted Allow-Origin value depends on the request's Origin."""
        if callable(self.allowed_origins):
            return True
        return any(o != WILDCARD for o in self.allowed_origins)

    def match_origin(self, origin: str) -> str | None:
        """Return the ``Access-Control-Allow-Origin`` value for *origin*, or ``None``.

        Exact members (or predicate hits) are echoed verbatim; otherwise the
        wildcard is used when configured.
        """
        origins = self.allowed_origins
        if callable(origins):
            try:
                allowed = bool(origins(origin))
            except Exception:
                logger.warning("cors_origin_predicate_failed", origin=origin, exc_info=True)
                allowed = False
            return origin if allowed else None

        if origin != WILDCARD and origin in origins:
            return origin
        if WILDCARD in origins:
            return WILDCARD
        return None

    def is_method_allowed(self, method: str | None) -> bool:
        if not method:
            return False
        return method.strip().upper() in self.allowed_methods

    def are_headers_allowed(self, names: Iterable[str]) -> bool:
        return all(name.lower() in self._header_keys for name in names)

    # ------------------------------------------------------------------
    # Pre-rendered header values
    # ------------------------------------------------------------------

    @property
    def allow_methods_value(self) -> str:
        return self._allow_methods_value

    @property
    def allow_headers_value(self) -> str:
        return self._allow_headers_value

    @property
    def expose_headers_value(self) -> str:
        return self._expose_headers_value

    def describe_origins(self) -> str:
        origins = self.allowed_origins
        if callable(origins):
            return f"<predicate {getattr(origins, '__name__', type(origins).__name__)}>"
        return ", ".join(sorted(origins)) or "<none>"
