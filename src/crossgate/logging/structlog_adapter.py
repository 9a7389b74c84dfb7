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
"""Logging setup for crossgate: structlog rendering through a stdlib handler."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from typing import Any, TextIO

import structlog

from crossgate.core.config import Config, config_properties
from crossgate.kernel.exceptions import ConfigurationException

HANDLER_NAME = "crossgate"
FORMATS = ("console", "json")


@config_properties(prefix="crossgate.logging")
@dataclass
class LoggingProperties:
    """Logging configuration (crossgate.logging.*).

    ``level`` is either a single level for every crossgate logger or a
    mapping with a ``root`` entry plus per-logger overrides::

        crossgate:
          logging:
            format: json
            level:
              root: WARNING
              crossgate.cors: DEBUG
    """

    level: dict[str, str] | str = field(default_factory=dict)
    format: str = "console"


class StructlogAdapter:
    """Configures structlog and the ``crossgate`` logger hierarchy.

    Only the ``crossgate`` logger gets a handler; the host application's
    root logger is left alone.  Reconfiguring replaces the handler
    installed by the previous call.
    """

    def __init__(self, default_level: str = "INFO", stream: TextIO | None = None) -> None:
        self._default_level = default_level.upper()
        self._stream = stream
        self._root_level = self._default_level
        self._module_levels: dict[str, str] = {}
        self._format = "console"

    @property
    def root_level(self) -> str:
        return self._root_level

    @property
    def module_levels(self) -> dict[str, str]:
        return dict(self._module_levels)

    @property
    def format(self) -> str:
        return self._format

    def configure(self, config: Config) -> StructlogAdapter:
        props = config.bind(LoggingProperties)

        fmt = props.format.strip().lower()
        if fmt not in FORMATS:
            raise ConfigurationException(
                f"Unknown log format {props.format!r}; expected one of {', '.join(FORMATS)}",
                context={"key": "crossgate.logging.format"},
            )

        levels = {"root": props.level} if isinstance(props.level, str) else dict(props.level)
        self._root_level = str(levels.pop("root", self._default_level)).upper()
        self._module_levels = {name: str(level).upper() for name, level in levels.items()}
        self._format = fmt

        self._install_handler()
        self._configure_structlog()
        self.set_level(HANDLER_NAME, self._root_level)
        for name, level in self._module_levels.items():
            self.set_level(name, level)
        return self

    def get_logger(self, name: str) -> Any:
        return structlog.get_logger(name)

    def set_level(self, name: str, level: str) -> None:
        """Set a stdlib logger's level; unknown names fall back to INFO."""
        log_level = getattr(logging, level.upper(), logging.INFO)
        logging.getLogger(name).setLevel(log_level)

    def _install_handler(self) -> None:
        logger = logging.getLogger(HANDLER_NAME)
        for existing in list(logger.handlers):
            if existing.get_name() == HANDLER_NAME:
                logger.removeHandler(existing)

        handler = logging.StreamHandler(self._stream or sys.stderr)
        handler.set_name(HANDLER_NAME)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
        logger.propagate = False

    def _configure_structlog(self) -> None:
        processors: list[structlog.types.Processor] = [
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
        ]

        if self._format == "json":
            processors.append(structlog.processors.format_exc_info)
            processors.append(structlog.processors.JSONRenderer())
        else:
            processors.append(structlog.dev.ConsoleRenderer(colors=False))

        structlog.configure(
            processors=processors,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=False,
        )
