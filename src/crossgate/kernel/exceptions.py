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
"""Unified exception hierarchy for crossgate.

All library exceptions inherit from CrossgateException. CORS evaluation
itself never raises: the only failures are configuration mistakes, which
are reported at construction time.

Categories:
- ConfigurationException: invalid or unreadable configuration
- InvalidCORSPolicyException: a CORS policy that violates the protocol
"""

from __future__ import annotations


# =============================================================================
# Base Exception
# =============================================================================


class CrossgateException(Exception):
    """Base exception for all crossgate errors.

    Carries an optional error code and context dict for structured error data.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "CORS_CREDENTIALS_WILDCARD").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigurationException(CrossgateException):
    """Configuration could not be loaded, resolved or bound."""


class InvalidCORSPolicyException(ConfigurationException):
    """A CORS policy combination that the protocol forbids."""


CREDENTIALS_WITH_WILDCARD = "CORS_CREDENTIALS_WILDCARD"
INVALID_MAX_AGE = "CORS_INVALID_MAX_AGE"
INVALID_ORIGIN = "CORS_INVALID_ORIGIN"
INVALID_TOKEN = "CORS_INVALID_TOKEN"
