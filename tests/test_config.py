"""Tests for configuration loading and settings resolution."""

import yaml

from orpheus.config import ConfigManager, DEFAULT_CONFIG
from orpheus.tools.registry import MergePolicy


def _manager(tmp_path, data=None, env=None):
    path = tmp_path / "config.yaml"
    if data is not None:
        path.write_text(yaml.safe_dump(data))
    return ConfigManager(str(path), env=env or {})


def test_config_creation(tmp_path):
    manager = _manager(tmp_path)
    assert manager.config_path.exists()
    assert manager.data["providers"] == DEFAULT_CONFIG["providers"]


def test_default_settings(tmp_path):
    env = {"GOOGLE": "g-key", "GITHUB": "gh-token"}
    settings = _manager(tmp_path, env=env).settings()

    assert settings.provider == "gemini"
    assert settings.provider_config.api_key == "g-key"
    assert settings.provider_config.model == "gemini-2.5-flash"
    assert settings.catalog.name == "github"
    assert settings.catalog.base_url == "https://api.githubcopilot.com/mcp/"
    assert settings.catalog.token == "gh-token"
    assert settings.config_document == "./config.yml"
    assert settings.sentinel == "END"
    assert settings.command_timeout is None
    assert settings.merge_policy is MergePolicy.FIRST_WINS


def test_missing_credentials_are_empty_not_fatal(tmp_path):
    settings = _manager(tmp_path).settings()
    assert settings.provider_config.api_key == ""
    assert settings.catalog.token == ""


def test_env_var_resolution(tmp_path):
    manager = _manager(tmp_path, env={"TEST_KEY": "test_value"})
    assert manager._resolve_env_var("${TEST_KEY}") == "test_value"
    assert manager._resolve_env_var("${MISSING}") == ""
    assert manager._resolve_env_var("plain_value") == "plain_value"


def test_overrides(tmp_path):
    data = {
        "providers": {"openai": {"api_key": "literal", "model": "gpt-4o-mini"}},
        "defaults": {"provider": "openai"},
        "catalog": {"enabled": False},
        "session": {"sentinel": "quit", "max_tool_rounds": 4},
        "tools": {"command_timeout": 30, "merge_policy": "last_wins"},
    }
    settings = _manager(tmp_path, data).settings(config_document="ops.yml")

    assert settings.provider == "openai"
    assert settings.provider_config.api_key == "literal"
    assert settings.provider_config.model == "gpt-4o-mini"
    assert settings.catalog is None
    assert settings.config_document == "ops.yml"
    assert settings.sentinel == "quit"
    assert settings.max_tool_rounds == 4
    assert settings.command_timeout == 30.0
    assert settings.merge_policy is MergePolicy.LAST_WINS


def test_provider_argument_wins(tmp_path):
    settings = _manager(tmp_path).settings(provider="openai")
    assert settings.provider == "openai"
    assert settings.provider_config.model == "gpt-4o"


def test_unknown_merge_policy_falls_back(tmp_path):
    manager = _manager(tmp_path, {"tools": {"merge_policy": "random"}})
    assert manager.get_merge_policy() is MergePolicy.FIRST_WINS


def test_invalid_yaml_gives_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("providers: [unclosed")
    manager = ConfigManager(str(path), env={})
    assert manager.data == {}
    assert manager.settings().provider == "gemini"
