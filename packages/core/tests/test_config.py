"""Tests for configuration loading and request construction."""

import pytest

from prereview_core.config import (
    DEFAULT_SYSTEM_PROMPT,
    build_request,
    compose_system_prompt,
    get_line_offset,
    load_config,
    parse_model,
    parse_repository,
)
from prereview_core.errors import ConfigurationError
from prereview_core.models import ModelId


def _config(**overrides):
    config = load_config(config_path="nonexistent.yml")
    config.update({"repository": "owner/repo", "pr_number": 7})
    config.update(overrides)
    return config


def test_defaults_applied_when_no_config_file(tmp_path):
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["model"] == "anthropic/claude-sonnet-4-20250514"
    assert config["max_input_tokens"] == 10_000
    assert config["max_output_tokens"] == 5_000
    assert config["line_offset"] == 1
    assert config["system_prompt"] is None


def test_config_file_overrides_defaults(tmp_path):
    cfg = tmp_path / ".prereview.yml"
    cfg.write_text("model: openai/gpt-4o\nmax_input_tokens: 2000\n")
    config = load_config(config_path=str(cfg))
    assert config["model"] == "openai/gpt-4o"
    assert config["max_input_tokens"] == 2000


def test_cli_overrides_config_file(tmp_path):
    cfg = tmp_path / ".prereview.yml"
    cfg.write_text("model: openai/gpt-4o\n")
    config = load_config(config_path=str(cfg), cli_overrides={"model": "anthropic/claude"})
    assert config["model"] == "anthropic/claude"


def test_none_cli_overrides_ignored(tmp_path):
    cfg = tmp_path / ".prereview.yml"
    cfg.write_text("model: openai/gpt-4o\n")
    config = load_config(config_path=str(cfg), cli_overrides={"model": None})
    assert config["model"] == "openai/gpt-4o"


def test_env_vars_loaded(monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", "gh-token")
    monkeypatch.setenv("PREREVIEW_MODEL_KEY", "model-key")
    config = load_config(config_path="nonexistent.yml")
    assert config["github_token"] == "gh-token"
    assert config["model_key"] == "model-key"


def test_defaults_are_not_shared_between_loads():
    config_a = load_config(config_path="nonexistent.yml")
    config_a["max_input_tokens"] = 1
    config_b = load_config(config_path="nonexistent.yml")
    assert config_b["max_input_tokens"] == 10_000


class TestParseRepository:
    def test_splits_owner_and_repo(self):
        assert parse_repository("octo/widgets") == ("octo", "widgets")

    @pytest.mark.parametrize("value", ["widgets", "", "/widgets", "octo/", None])
    def test_malformed_raises(self, value):
        with pytest.raises(ConfigurationError):
            parse_repository(value)


class TestParseModel:
    def test_splits_on_first_slash(self):
        assert parse_model("openai/ft:gpt-4o/v2") == ModelId(provider="openai", name="ft:gpt-4o/v2")

    @pytest.mark.parametrize("value", ["gpt-4o", "", "/gpt-4o", "openai/"])
    def test_malformed_raises(self, value):
        with pytest.raises(ConfigurationError):
            parse_model(value)

    def test_str_round_trips(self):
        assert str(parse_model("anthropic/claude")) == "anthropic/claude"


class TestComposeSystemPrompt:
    def test_blank_falls_back_to_default(self):
        assert compose_system_prompt("   \n") == DEFAULT_SYSTEM_PROMPT.strip()

    def test_none_falls_back_to_default(self):
        assert compose_system_prompt(None) == DEFAULT_SYSTEM_PROMPT.strip()

    def test_addition_is_appended(self):
        assert compose_system_prompt("Be strict.", "Prefer Go idioms.") == "Be strict.\nPrefer Go idioms."

    def test_addition_appended_to_default(self):
        prompt = compose_system_prompt("", "Also check SQL.")
        assert prompt.startswith("You are an expert code reviewer.")
        assert prompt.endswith("Also check SQL.")


class TestBuildRequest:
    def test_builds_frozen_request(self):
        request = build_request(_config(model="openai/gpt-4o"))
        assert request.owner == "owner"
        assert request.repository == "repo"
        assert request.pr_number == 7
        assert request.model == ModelId("openai", "gpt-4o")
        assert request.max_input_tokens == 10_000
        assert request.max_output_tokens == 5_000
        assert request.full_name == "owner/repo"
        with pytest.raises(AttributeError):
            request.pr_number = 8

    def test_numeric_strings_from_yaml_or_env_accepted(self):
        request = build_request(_config(pr_number="12", max_input_tokens="300"))
        assert request.pr_number == 12
        assert request.max_input_tokens == 300

    def test_missing_pr_number_raises(self):
        with pytest.raises(ConfigurationError):
            build_request(_config(pr_number=None))

    def test_non_integer_pr_number_raises(self):
        with pytest.raises(ConfigurationError):
            build_request(_config(pr_number="abc"))

    def test_malformed_repository_raises(self):
        with pytest.raises(ConfigurationError):
            build_request(_config(repository="just-a-name"))

    def test_malformed_model_raises(self):
        with pytest.raises(ConfigurationError):
            build_request(_config(model="gpt-4o"))

    def test_system_prompt_composed(self):
        request = build_request(_config(system_prompt="Custom.", system_prompt_addition="More."))
        assert request.system_prompt == "Custom.\nMore."


def test_line_offset_from_config():
    assert get_line_offset(_config(line_offset="2")) == 2
