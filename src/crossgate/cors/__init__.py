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
"""CORS policy, request context and header evaluation."""

from crossgate.cors.evaluator import CORSDecision, RequestKind, evaluate
from crossgate.cors.holder import PolicyHolder, PolicySource
from crossgate.cors.policy import DEFAULT_METHODS, WILDCARD, CORSPolicy
from crossgate.cors.properties import CORSProperties
from crossgate.cors.request import CORSRequest

__all__ = [
    "DEFAULT_METHODS",
    "WILDCARD",
    "CORSDecision",
    "CORSPolicy",
    "CORSProperties",
    "CORSRequest",
    "PolicyHolder",
    "PolicySource",
    "RequestKind",
    "evaluate",
]
