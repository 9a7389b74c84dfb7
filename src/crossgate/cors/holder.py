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
"""Policy sources — static policies and copy-on-write reloadable holders."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import structlog

from crossgate.cors.policy import CORSPolicy

if TYPE_CHECKING:
    from crossgate.core.config import Config

logger = structlog.get_logger("crossgate.cors")


@runtime_checkable
class PolicySource(Protocol):
    """Anything that hands out the policy in force right now.

    Readers fetch ``current`` once per request and use that snapshot for
    the whole request.
    """

    @property
    def current(self) -> CORSPolicy: ...


class PolicyHolder:
    """Publishes new immutable :class:`CORSPolicy` snapshots atomically.

    Readers never lock: they see either the old policy or the new one,
    never a mix.  Publishers are serialised so ``version`` increases by
    exactly one per publish.
    """

    def __init__(self, initial: CORSPolicy) -> None:
        self._policy = initial
        self._version = 1
        self._lock = threading.Lock()

    @property
    def current(self) -> CORSPolicy:
        return self._policy

    @property
    def version(self) -> int:
        return self._version

    def publish(self, policy: CORSPolicy) -> CORSPolicy:
        """Swap in *policy*; returns the policy it replaced."""
        with self._lock:
            previous = self._policy
            self._policy = policy
            self._version += 1
            version = self._version
        logger.info(
            "cors_policy_published",
            version=version,
            origins=policy.describe_origins(),
            allow_credentials=policy.allow_credentials,
        )
        return previous

    def reload(self, config: Config) -> CORSPolicy:
        """Rebuild the policy from *config* and publish it.

        Raises :class:`InvalidCORSPolicyException` without touching the
        current policy when the new configuration is invalid.
        """
        policy = CORSPolicy.from_config(config)
        self.publish(policy)
        return policy

    @classmethod
    def from_config(cls, config: Config) -> PolicyHolder:
        return cls(CORSPolicy.from_config(config))
