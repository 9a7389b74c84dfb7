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
"""Tests for the crossgate CLI."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from crossgate.cli.main import cli

VALID = """\
crossgate:
  cors:
    allowed_origins:
      - http://localhost:8080
    allowed_methods: [GET, OPTIONS]
    allowed_headers: [Content-Type]
    allow_credentials: true
    max_age: 600
"""

INVALID = """\
crossgate:
  cors:
    allowed_origins: "*"
    allow_credentials: true
"""


@pytest.fixture
def valid_config(tmp_path: Path) -> Path:
    path = tmp_path / "crossgate.yaml"
    path.write_text(VALID)
    return path


@pytest.fixture
def invalid_config(tmp_path: Path) -> Path:
    path = tmp_path / "crossgate.yaml"
    path.write_text(INVALID)
    return path


class TestCLI:
    def test_help(self):
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "crossgate" in result.output
        assert "check" in result.output
        assert "preflight" in result.output


class TestCheckCommand:
    def test_valid_policy(self, valid_config):
        result = CliRunner().invoke(cli, ["check", str(valid_config)])
        assert result.exit_code == 0, result.output
        assert "http://localhost:8080" in result.output
        assert "GET, OPTIONS" in result.output
        assert "600s" in result.output
        assert "Policy is valid" in result.output

    def test_invalid_policy_exits_non_zero(self, invalid_config):
        result = CliRunner().invoke(cli, ["check", str(invalid_config)])
        assert result.exit_code == 1
        assert "CORS_CREDENTIALS_WILDCARD" in result.output

    def test_profile_overlay(self, valid_config, tmp_path):
        (tmp_path / "crossgate-prod.yaml").write_text("crossgate:\n  cors:\n    max_age: 86400\n")
        result = CliRunner().invoke(cli, ["check", str(valid_config), "--profile", "prod"])
        assert result.exit_code == 0, result.output
        assert "86400s" in result.output

    def test_missing_file(self, tmp_path):
        result = CliRunner().invoke(cli, ["check", str(tmp_path / "missing.yaml")])
        assert result.exit_code != 0


class TestPreflightCommand:
    def test_allowed_preflight(self, valid_config):
        result = CliRunner().invoke(
            cli,
            ["preflight", str(valid_config), "--origin", "http://localhost:8080", "--header", "Content-Type"],
        )
        assert result.exit_code == 0, result.output
        assert "HTTP 204" in result.output
        assert "Access-Control-Allow-Origin: http://localhost:8080" in result.output
        assert "Access-Control-Allow-Credentials: true" in result.output
        assert "Browser will send the actual request" in result.output

    def test_rejected_origin(self, valid_config):
        result = CliRunner().invoke(cli, ["preflight", str(valid_config), "--origin", "http://evil.example"])
        assert result.exit_code == 0, result.output
        assert "Access-Control-Allow-Origin" not in result.output
        assert "Access-Control-Allow-Methods: GET, OPTIONS" in result.output
        assert "Origin is not allowed" in result.output

    def test_disallowed_method(self, valid_config):
        result = CliRunner().invoke(
            cli,
            ["preflight", str(valid_config), "--origin", "http://localhost:8080", "--method", "DELETE"],
        )
        assert result.exit_code == 0, result.output
        assert "Method DELETE is not in the allow-list" in result.output


class TestCLILogging:
    def test_info_events_hidden_by_default(self, valid_config):
        result = CliRunner().invoke(cli, ["check", str(valid_config)])
        assert result.exit_code == 0, result.output
        assert "cors_policy_created" not in result.output

    def test_logging_section_applies(self, tmp_path):
        path = tmp_path / "crossgate.yaml"
        path.write_text(VALID + "  logging:\n    level: INFO\n    format: json\n")

        result = CliRunner().invoke(cli, ["check", str(path)])

        assert result.exit_code == 0, result.output
        assert '"event": "cors_policy_created"' in result.output

    def test_bad_log_format_exits_non_zero(self, tmp_path):
        path = tmp_path / "crossgate.yaml"
        path.write_text(VALID + "  logging:\n    format: xml\n")

        result = CliRunner().invoke(cli, ["check", str(path)])

        assert result.exit_code == 1
        assert "Unknown log format" in result.output
