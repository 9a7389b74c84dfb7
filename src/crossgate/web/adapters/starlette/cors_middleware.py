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
"""CORS middleware for Starlette — pure ASGI."""

from __future__ import annotations

from starlette.datastructures import MutableHeaders
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from crossgate.cors.evaluator import VARY, CORSDecision, evaluate, merge_vary
from crossgate.cors.holder import PolicySource
from crossgate.cors.policy import CORSPolicy
from crossgate.cors.request import CORSRequest


def apply_decision(headers: MutableHeaders, decision: CORSDecision) -> None:
    """Write *decision* onto a mutable header set, merging ``Vary``."""
    for name, value in decision.headers:
        headers[name] = value
    if decision.vary:
        headers[VARY] = merge_vary(headers.get(VARY), decision.vary)


def preflight_response(decision: CORSDecision) -> Response:
    """``204 No Content`` carrying the preflight headers and no body."""
    return Response(status_code=204, headers=decision.as_dict())


class CORSMiddleware:
    """Applies a :class:`CORSPolicy` in front of the whole application.

    - No ``Origin``: the request passes through untouched.
    - Preflight (``OPTIONS`` + ``Access-Control-Request-Method``): answered
      here with 204; the wrapped app never sees it, so no authentication
      or cookie check can fail a preflight.
    - Anything else with an ``Origin``: forwarded, with the CORS headers
      merged into ``http.response.start`` before any body bytes go out.

    The policy is read once per request from *policy* (a static
    :class:`CORSPolicy` or a :class:`PolicySource` such as
    :class:`~crossgate.cors.holder.PolicyHolder`).

    Uses raw ASGI protocol instead of ``BaseHTTPMiddleware`` so that
    streaming responses and handler exceptions pass through unchanged.
    """

    def __init__(self, app: ASGIApp, policy: CORSPolicy | PolicySource) -> None:
        self.app = app
        self._source = policy

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        decision = evaluate(self._source.current, CORSRequest.from_scope(scope))

        if decision.passes_through:
            await self.app(scope, receive, send)
            return

        if decision.is_preflight:
            await preflight_response(decision)(scope, receive, send)
            return

        async def send_with_cors(message: Message) -> None:
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                apply_decision(MutableHeaders(scope=message), decision)
            await send(message)

        await self.app(scope, receive, send_with_cors)
