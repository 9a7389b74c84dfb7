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
"""CORS configuration properties (``crossgate.cors.*``)."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from crossgate.core.config import Config, config_properties
from crossgate.cors.policy import DEFAULT_METHODS
from crossgate.kernel.exceptions import ConfigurationException, InvalidCORSPolicyException

CORS_PREFIX = "crossgate.cors"


@config_properties(prefix=CORS_PREFIX)
class CORSProperties(BaseModel):
    """Configuration for the CORS middleware (crossgate.cors.*).

    List fields accept YAML/TOML sequences or comma-separated strings, the
    latter being how they arrive from environment variables::

        CROSSGATE_CORS_ALLOWED_ORIGINS="https://app.example.com,https://admin.example.com"
    """

    allowed_origins: list[str] = Field(default_factory=list)
    allowed_methods: list[str] = Field(default_factory=lambda: list(DEFAULT_METHODS))
    allowed_headers: list[str] = Field(default_factory=list)
    allow_credentials: bool = False
    max_age: int | None = None
    exposed_headers: list[str] = Field(default_factory=list)

    @field_validator(
        "allowed_origins", "allowed_methods", "allowed_headers", "exposed_headers", mode="before"
    )
    @classmethod
    def _split_csv(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    @classmethod
    def from_config(cls, config: Config) -> CORSProperties:
        """Bind ``crossgate.cors``, env overrides included, failing as a policy error."""
        try:
            return config.bind(cls)
        except ConfigurationException as exc:
            raise InvalidCORSPolicyException(str(exc), context=exc.context) from exc
