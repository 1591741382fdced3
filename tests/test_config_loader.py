"""Tests for configuration loading."""

import json
from pathlib import Path

import pytest

from promptapi.config_loader import (
    load_api_config,
    load_app_config,
    parse_api_config,
    parse_app_config,
    resolve_env_vars,
)
from promptapi.errors import ConfigError


class TestResolveEnvVars:
    """Tests for ${VAR} interpolation."""

    def test_resolves_set_variable(self, monkeypatch):
        monkeypatch.setenv("PROMPTAPI_TEST_MODEL", "gpt-test")
        assert resolve_env_vars("${PROMPTAPI_TEST_MODEL}") == "gpt-test"

    def test_uses_default_when_unset(self, monkeypatch):
        monkeypatch.delenv("PROMPTAPI_UNSET", raising=False)
        assert resolve_env_vars("${PROMPTAPI_UNSET:-fallback}") == "fallback"

    def test_unset_without_default_is_empty(self, monkeypatch):
        monkeypatch.delenv("PROMPTAPI_UNSET", raising=False)
        assert resolve_env_vars("x${PROMPTAPI_UNSET}y") == "xy"

    def test_plain_string_untouched(self):
        assert resolve_env_vars("no variables here") == "no variables here"


class TestParseAppConfig:
    """Tests for building AppConfig from a mapping."""

    def test_empty_mapping_gives_defaults(self):
        config = parse_app_config({})
        assert config.orchestration.max_depth == 5
        assert config.completion.model == "gpt-4o-mini"
        assert config.executor.timeout == 30.0
        assert config.server.port == 3000
        assert config.langfuse.is_configured is False

    def test_sections_are_parsed(self, monkeypatch):
        monkeypatch.setenv("PROMPTAPI_TEST_PORT", "8080")
        config = parse_app_config(
            {
                "completion": {"model": "local-model", "timeout": "12"},
                "orchestration": {"max_depth": 3, "session_timeout": 90},
                "server": {"port": "${PROMPTAPI_TEST_PORT}", "cors_origins": "a.com, b.com"},
                "logging": {"level": "DEBUG"},
            }
        )
        assert config.completion.model == "local-model"
        assert config.completion.timeout == 12.0
        assert config.orchestration.max_depth == 3
        assert config.orchestration.session_timeout == 90.0
        assert config.server.port == 8080
        assert config.server.cors_origins == ("a.com", "b.com")
        assert config.log_level == "DEBUG"

    def test_reload_string_is_parsed_as_bool(self):
        assert parse_app_config({"server": {"reload": "true"}}).server.reload is True
        assert parse_app_config({"server": {"reload": "false"}}).server.reload is False

    def test_max_depth_below_one_rejected(self):
        with pytest.raises(ConfigError, match="max_depth"):
            parse_app_config({"orchestration": {"max_depth": 0}})

    def test_section_must_be_mapping(self):
        with pytest.raises(ConfigError, match="completion"):
            parse_app_config({"completion": ["not", "a", "mapping"]})

    def test_bad_number_is_config_error(self):
        with pytest.raises(ConfigError):
            parse_app_config({"server": {"port": "eighty"}})

    def test_langfuse_configured_with_both_keys(self):
        config = parse_app_config(
            {"langfuse": {"public_key": "pk", "secret_key": "sk"}}
        )
        assert config.langfuse.is_configured is True


class TestLoadAppConfig:
    """Tests for reading the YAML file."""

    def test_missing_file_uses_defaults(self, tmp_path):
        config = load_app_config(str(tmp_path / "missing.yaml"))
        assert config.orchestration.max_depth == 5

    def test_reads_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("orchestration:\n  max_depth: 2\n")
        assert load_app_config(str(path)).orchestration.max_depth == 2

    def test_config_path_env_var(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.yaml"
        path.write_text("completion:\n  model: from-env\n")
        monkeypatch.setenv("CONFIG_PATH", str(path))
        assert load_app_config().completion.model == "from-env"

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_app_config(str(path)).server.port == 3000

    def test_invalid_yaml_raises(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("completion: [unclosed\n")
        with pytest.raises(ConfigError):
            load_app_config(str(path))

    def test_non_mapping_raises(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_app_config(str(path))


class TestApiConfig:
    """Tests for the API descriptor file."""

    def test_parse_valid_descriptor(self):
        config = parse_api_config(
            {"baseUrl": "https://example.com/api", "documentation": "GET /things"}
        )
        assert config.base_url == "https://example.com/api"
        assert config.documentation == "GET /things"

    def test_parse_accepts_snake_case_alias(self):
        config = parse_api_config({"base_url": "https://example.com", "documentation": "docs"})
        assert config.base_url == "https://example.com"

    @pytest.mark.parametrize(
        "data",
        [
            {"documentation": "docs"},
            {"baseUrl": "", "documentation": "docs"},
            {"baseUrl": "https://example.com"},
            {"baseUrl": "https://example.com", "documentation": 42},
            ["not", "an", "object"],
        ],
    )
    def test_parse_invalid_descriptor(self, data):
        with pytest.raises(ConfigError, match="Invalid API configuration"):
            parse_api_config(data)

    def test_load_json_file(self, tmp_path):
        path = tmp_path / "api.json"
        path.write_text(
            json.dumps({"baseUrl": "https://example.com/api", "documentation": "docs"})
        )
        assert load_api_config(str(path)).base_url == "https://example.com/api"

    def test_load_yaml_file(self, tmp_path):
        path = tmp_path / "api.yaml"
        path.write_text("baseUrl: https://example.com/api\ndocumentation: |\n  GET /things\n")
        assert load_api_config(str(path)).documentation == "GET /things\n"

    def test_load_tab_indented_json(self, tmp_path):
        path = tmp_path / "api.json"
        path.write_text(
            '{\n\t"baseUrl": "https://example.com/api",\n\t"documentation": "GET /books"\n}'
        )
        config = load_api_config(str(path))
        assert config.base_url == "https://example.com/api"
        assert config.documentation == "GET /books"

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_api_config(str(tmp_path / "nope.json"))

    def test_load_unparseable_file(self, tmp_path):
        path = tmp_path / "api.json"
        path.write_text('{"baseUrl": ')
        with pytest.raises(ConfigError, match="Could not load"):
            load_api_config(str(path))

    def test_bundled_descriptor_is_valid(self):
        path = Path(__file__).resolve().parent.parent / "apis" / "fire-and-ice.json"
        config = load_api_config(str(path))
        assert config.base_url == "https://www.anapioficeandfire.com/api"
        assert "/books" in config.documentation
