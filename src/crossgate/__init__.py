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
"""crossgate — CORS policy middleware for Starlette/ASGI applications."""

from crossgate.cors import CORSPolicy, CORSProperties, PolicyHolder, evaluate
from crossgate.kernel.exceptions import InvalidCORSPolicyException
from crossgate.web.adapters.starlette import CORSFilter, CORSMiddleware, create_app

__version__ = "0.1.0"

__all__ = [
    "CORSFilter",
    "CORSMiddleware",
    "CORSPolicy",
    "CORSProperties",
    "InvalidCORSPolicyException",
    "PolicyHolder",
    "__version__",
    "create_app",
    "evaluate",
]
