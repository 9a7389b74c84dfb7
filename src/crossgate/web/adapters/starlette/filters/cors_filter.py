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
"""CORS filter — the CORS rules as a WebFilter at the head of the chain."""

from __future__ import annotations

from starlette.requests import Request
from starlette.responses import Response

from crossgate.container.ordering import HIGHEST_PRECEDENCE, order
from crossgate.cors.evaluator import evaluate
from crossgate.cors.holder import PolicySource
from crossgate.cors.policy import CORSPolicy
from crossgate.cors.request import CORSRequest
from crossgate.web.adapters.starlette.cors_middleware import apply_decision, preflight_response
from crossgate.web.filters import OncePerRequestFilter
from crossgate.web.ports.filter import CallNext


@order(HIGHEST_PRECEDENCE)
class CORSFilter(OncePerRequestFilter):
    """Short-circuits preflights and decorates cross-origin responses.

    Runs first in the chain, so filters ordered after it (authentication,
    cookie checks) never see a preflight.
    """

    def __init__(self, policy: CORSPolicy | PolicySource) -> None:
        self._source = policy

    async def do_filter(self, request: Request, call_next: CallNext) -> Response:
        decision = evaluate(
            self._source.current,
            CORSRequest.from_headers(request.method, request.headers),
        )

        if decision.passes_through:
            return await call_next(request)

        if decision.is_preflight:
            return preflight_response(decision)

        response: Response = await call_next(request)
        apply_decision(response.headers, decision)
        return response
