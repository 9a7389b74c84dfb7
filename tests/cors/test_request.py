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
"""Tests for CORSRequest — per-request context parsing."""

from __future__ import annotations

from starlette.datastructures import Headers

from crossgate.cors.request import CORSRequest, parse_header_list


class TestParseHeaderList:
    def test_splits_strips_and_lowercases(self):
        assert parse_header_list(" Content-Type ,X-Api-Key") == ("content-type", "x-api-key")

    def test_drops_empty_entries(self):
        assert parse_header_list("a,, ,b,") == ("a", "b")

    def test_missing_value(self):
        assert parse_header_list(None) == ()
        assert parse_header_list("") == ()


class TestCORSRequestFromHeaders:
    def test_no_origin_is_not_cross_origin(self):
        ctx = CORSRequest.from_headers("GET", Headers({}))
        assert ctx.origin is None
        assert ctx.is_cross_origin is False
        assert ctx.is_preflight is False

    def test_actual_request(self):
        ctx = CORSRequest.from_headers("get", Headers({"Origin": "http://a.example"}))
        assert ctx.method == "GET"
        assert ctx.origin == "http://a.example"
        assert ctx.is_cross_origin is True
        assert ctx.is_preflight is False

    def test_preflight_requires_options_and_request_method(self):
        headers = Headers(
            {
                "Origin": "http://a.example",
                "Access-Control-Request-Method": "PUT",
                "Access-Control-Request-Headers": "Content-Type, X-Api-Key",
            }
        )
        ctx = CORSRequest.from_headers("OPTIONS", headers)
        assert ctx.is_preflight is True
        assert ctx.requested_method == "PUT"
        assert ctx.requested_headers == ("content-type", "x-api-key")

    def test_options_without_request_method_is_not_preflight(self):
        ctx = CORSRequest.from_headers("OPTIONS", Headers({"Origin": "http://a.example"}))
        assert ctx.is_preflight is False

    def test_request_method_on_non_options_is_not_preflight(self):
        headers = Headers({"Origin": "http://a.example", "Access-Control-Request-Method": "GET"})
        assert CORSRequest.from_headers("POST", headers).is_preflight is False

    def test_empty_request_method_header_still_marks_preflight(self):
        headers = Headers({"Origin": "http://a.example", "Access-Control-Request-Method": ""})
        ctx = CORSRequest.from_headers("OPTIONS", headers)
        assert ctx.is_preflight is True
        assert ctx.requested_method == ""

    def test_plain_dict_with_lowercase_keys(self):
        ctx = CORSRequest.from_headers("OPTIONS", {"origin": "http://a.example", "access-control-request-method": "GET"})
        assert ctx.is_preflight is True


class TestCORSRequestFromScope:
    def test_reads_raw_asgi_headers(self):
        scope = {
            "type": "http",
            "method": "OPTIONS",
            "headers": [
                (b"origin", b"http://localhost:8080"),
                (b"access-control-request-method", b"GET"),
            ],
        }
        ctx = CORSRequest.from_scope(scope)
        assert ctx.origin == "http://localhost:8080"
        assert ctx.is_preflight is True
