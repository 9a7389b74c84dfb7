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
"""crossgate application factory built on Starlette."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.routing import BaseRoute

from crossgate.container.ordering import get_order
from crossgate.core.config import Config
from crossgate.cors.holder import PolicyHolder, PolicySource
from crossgate.cors.policy import CORSPolicy
from crossgate.logging.structlog_adapter import StructlogAdapter
from crossgate.web.adapters.starlette.cors_middleware import CORSMiddleware
from crossgate.web.adapters.starlette.filter_chain import WebFilterChainMiddleware
from crossgate.web.adapters.starlette.filters import RequestLoggingFilter
from crossgate.web.ports.filter import WebFilter


def create_app(
    routes: Sequence[BaseRoute] | None = None,
    cors: CORSPolicy | PolicySource | None = None,
    filters: Sequence[WebFilter] = (),
    debug: bool = False,
    request_logging: bool = True,
    lifespan: Any | None = None,
    config: Config | None = None,
) -> Starlette:
    """Create a Starlette application with CORS applied to the whole routing tree.

    Middleware, outermost first:
    - ``CORSMiddleware`` (when ``cors`` is provided) — answers preflights
      before anything else runs
    - ``WebFilterChainMiddleware`` — request logging plus caller filters
      (authentication, cookie checks, ...), sorted by ``@order``

    Authentication filters therefore only ever see actual requests.

    With *config*, logging is configured from ``crossgate.logging`` and, when
    *cors* is not given, the policy is built from ``crossgate.cors`` into a
    :class:`PolicyHolder`.  The active source is exposed as
    ``app.state.cors`` so it can be reloaded at runtime.
    """
    if config is not None:
        StructlogAdapter().configure(config)
        if cors is None:
            cors = PolicyHolder.from_config(config)

    chain: list[WebFilter] = []
    if request_logging:
        chain.append(RequestLoggingFilter())
    chain.extend(filters)
    chain.sort(key=lambda f: get_order(type(f)))

    middleware: list[Middleware] = []
    if cors is not None:
        middleware.append(Middleware(CORSMiddleware, policy=cors))
    if chain:
        middleware.append(Middleware(WebFilterChainMiddleware, filters=chain))

    app = Starlette(
        debug=debug,
        middleware=middleware,
        routes=list(routes or []),
        lifespan=lifespan,
    )
    app.state.cors = cors
    return app
