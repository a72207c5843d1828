"""Tests for configuration loading."""

import pytest

from revfix_core.config import DEFAULT_CONFIG, load_config, validate_config
from revfix_core.exceptions import ValidationError


def test_defaults_applied_when_no_config_file(tmp_path):
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["model"] == "openai"
    assert config["discussions_file"] == "discussions.json"
    assert config["undo_file"] == "undo.json"
    assert config["default_file"] == "app.js"
    assert config["context_radius"] == 2
    assert config["local_only"] is False


def test_config_file_overrides_defaults(tmp_path):
    cfg = tmp_path / ".revfix.yml"
    cfg.write_text("model: anthropic\nbackup_keep: 10\n")
    config = load_config(config_path=str(cfg))
    assert config["model"] == "anthropic"
    assert config["backup_keep"] == 10


def test_cli_overrides_config_file(tmp_path):
    cfg = tmp_path / ".revfix.yml"
    cfg.write_text("model: anthropic\n")
    config = load_config(config_path=str(cfg), cli_overrides={"model": "openai"})
    assert config["model"] == "openai"


def test_none_cli_overrides_ignored(tmp_path):
    cfg = tmp_path / ".revfix.yml"
    cfg.write_text("model: anthropic\n")
    config = load_config(config_path=str(cfg), cli_overrides={"model": None})
    assert config["model"] == "anthropic"


def test_empty_config_file_uses_defaults(tmp_path):
    cfg = tmp_path / ".revfix.yml"
    cfg.write_text("")
    config = load_config(config_path=str(cfg))
    assert config["model"] == DEFAULT_CONFIG["model"]


def test_non_mapping_config_file_rejected(tmp_path):
    cfg = tmp_path / ".revfix.yml"
    cfg.write_text("- just\n- a list\n")
    with pytest.raises(ValidationError):
        load_config(config_path=str(cfg))


def test_credentials_read_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", "gh-tok")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    config = load_config(config_path=str(tmp_path / "none.yml"))
    assert config["github_token"] == "gh-tok"
    assert config["openai_api_key"] == "sk-test"
    assert config["anthropic_api_key"] is None


def test_defaults_are_not_mutated(tmp_path):
    cfg = tmp_path / ".revfix.yml"
    cfg.write_text("backup_keep: 1\n")
    load_config(config_path=str(cfg))
    assert DEFAULT_CONFIG["backup_keep"] == 5


class TestValidateConfig:
    def test_defaults_are_valid(self):
        validate_config(dict(DEFAULT_CONFIG))

    def test_unknown_model(self):
        with pytest.raises(ValidationError, match="Unknown model provider"):
            validate_config({**DEFAULT_CONFIG, "model": "llama"})

    @pytest.mark.parametrize("key", ["backup_keep", "context_radius", "max_open_prs"])
    def test_negative_integers_rejected(self, key):
        with pytest.raises(ValidationError, match=key):
            validate_config({**DEFAULT_CONFIG, key: -1})

    def test_boolean_is_not_an_integer(self):
        with pytest.raises(ValidationError):
            validate_config({**DEFAULT_CONFIG, "context_radius": True})
