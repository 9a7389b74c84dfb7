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
"""Tests for Config — file loading, env overrides, placeholders, and binding."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import pytest

from crossgate.core.config import Config, config_properties, env_key_for
from crossgate.kernel.exceptions import ConfigurationException


class TestConfigGet:
    def test_get_nested_value(self):
        config = Config({"crossgate": {"cors": {"max_age": 600}}})
        assert config.get("crossgate.cors.max_age") == 600

    def test_get_with_default(self):
        assert Config({}).get("missing.key", "default") == "default"

    def test_env_var_override(self, monkeypatch):
        monkeypatch.setenv("CROSSGATE_CORS_MAX_AGE", "60")
        config = Config({"crossgate": {"cors": {"max_age": 600}}})
        assert config.get("crossgate.cors.max_age") == "60"

    def test_env_key_mapping(self):
        assert env_key_for("crossgate.cors.allowed-origins") == "CROSSGATE_CORS_ALLOWED_ORIGINS"
        assert env_key_for("app.name") == "CROSSGATE_APP_NAME"


class TestPlaceholders:
    def test_env_placeholder(self, monkeypatch):
        monkeypatch.setenv("FRONTEND", "https://app.example")
        config = Config({"crossgate": {"cors": {"origin": "${FRONTEND}"}}})
        assert config.get("crossgate.cors.origin") == "https://app.example"

    def test_config_reference(self):
        config = Config({"site": {"url": "https://app.example"}, "cors": {"origin": "${site.url}"}})
        assert config.get("cors.origin") == "https://app.example"

    def test_default_value(self):
        config = Config({"cors": {"origin": "${UNSET_FRONTEND_ORIGIN_XYZ:http://localhost:8080}"}})
        assert config.get("cors.origin") == "http://localhost:8080"

    def test_unresolvable_placeholder(self):
        config = Config({"cors": {"origin": "${UNSET_FRONTEND_ORIGIN_XYZ}"}})
        with pytest.raises(ConfigurationException, match="Cannot resolve placeholder"):
            config.get("cors.origin")

    def test_circular_reference(self):
        config = Config({"a": "${b}", "b": "${a}"})
        with pytest.raises(ConfigurationException, match="circular"):
            config.get("a")


class TestConfigFiles:
    def test_load_from_yaml_file(self, tmp_path: Path):
        config_file = tmp_path / "crossgate.yaml"
        config_file.write_text("crossgate:\n  cors:\n    allowed_origins:\n      - http://localhost:8080\n")
        config = Config.from_file(config_file)
        assert config.get("crossgate.cors.allowed_origins") == ["http://localhost:8080"]
        assert config.loaded_sources == [str(config_file)]

    def test_load_from_toml_file(self, tmp_path: Path):
        config_file = tmp_path / "crossgate.toml"
        config_file.write_text('[crossgate.cors]\nallowed_origins = ["http://localhost:8080"]\nmax_age = 600\n')
        config = Config.from_file(config_file)
        assert config.get("crossgate.cors.max_age") == 600

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigurationException, match="not found"):
            Config.from_file(tmp_path / "nope.yaml")

    def test_malformed_yaml(self, tmp_path: Path):
        config_file = tmp_path / "crossgate.yaml"
        config_file.write_text("crossgate: [unclosed\n")
        with pytest.raises(ConfigurationException, match="Cannot parse"):
            Config.from_file(config_file)

    def test_empty_file(self, tmp_path: Path):
        config_file = tmp_path / "crossgate.yaml"
        config_file.write_text("")
        assert Config.from_file(config_file).to_dict() == {}


class TestProfileConfigMerging:
    def test_merge_profile_config(self, tmp_path: Path):
        base = tmp_path / "crossgate.yaml"
        base.write_text("crossgate:\n  cors:\n    max_age: 600\n    allow_credentials: false\n")
        profile = tmp_path / "crossgate-dev.yaml"
        profile.write_text("crossgate:\n  cors:\n    allow_credentials: true\n")

        config = Config.from_file(base, active_profiles=["dev"])

        assert config.get("crossgate.cors.max_age") == 600
        assert config.get("crossgate.cors.allow_credentials") is True
        assert len(config.loaded_sources) == 2

    def test_later_profile_wins(self, tmp_path: Path):
        (tmp_path / "crossgate.yaml").write_text("db:\n  url: base\n")
        (tmp_path / "crossgate-dev.yaml").write_text("db:\n  url: dev-url\n")
        (tmp_path / "crossgate-local.yaml").write_text("db:\n  url: local-url\n")

        config = Config.from_file(tmp_path / "crossgate.yaml", active_profiles=["dev", "local"])
        assert config.get("db.url") == "local-url"

    def test_missing_profile_file_is_skipped(self, tmp_path: Path):
        base = tmp_path / "crossgate.yaml"
        base.write_text("app:\n  name: test\n")
        config = Config.from_file(base, active_profiles=["nonexistent"])
        assert config.get("app.name") == "test"


class TestConfigProperties:
    def test_bind_to_dataclass(self):
        @config_properties(prefix="crossgate.server")
        @dataclass
        class ServerProperties:
            host: str = "127.0.0.1"
            port: int = 8000
            debug: bool = False

        config = Config({"crossgate": {"server": {"port": "9000", "debug": "yes"}}})
        props = config.bind(ServerProperties)

        assert props.host == "127.0.0.1"
        assert props.port == 9000
        assert props.debug is True

    def test_bind_undecorated_class(self):
        @dataclass
        class Plain:
            value: str = "x"

        with pytest.raises(ConfigurationException, match="not decorated"):
            Config({}).bind(Plain)

    def test_bind_applies_env_overrides(self, monkeypatch):
        @config_properties(prefix="crossgate.server")
        @dataclass
        class ServerProperties:
            port: int = 8000

        monkeypatch.setenv("CROSSGATE_SERVER_PORT", "9100")
        assert Config({"crossgate": {"server": {"port": 9000}}}).bind(ServerProperties).port == 9100

    def test_bind_resolves_placeholders(self, monkeypatch):
        @config_properties(prefix="crossgate.server")
        @dataclass
        class ServerProperties:
            host: str = "127.0.0.1"

        monkeypatch.setenv("BIND_HOST", "0.0.0.0")
        config = Config({"crossgate": {"server": {"host": "${BIND_HOST}"}}})
        assert config.bind(ServerProperties).host == "0.0.0.0"

    def test_bind_bad_int_raises_configuration_error(self):
        @config_properties(prefix="crossgate.server")
        @dataclass
        class ServerProperties:
            port: int = 8000

        with pytest.raises(ConfigurationException, match="crossgate.server.port"):
            Config({"crossgate": {"server": {"port": "eighty"}}}).bind(ServerProperties)
