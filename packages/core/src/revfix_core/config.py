import os
from pathlib import Path
from typing import Optional

import yaml

from revfix_core.exceptions import ValidationError

DEFAULT_CONFIG: dict = {
    "model": "openai",
    "discussions_file": "discussions.json",
    "undo_file": "undo.json",
    "backup_dir": ".revfix-backups",
    "backup_keep": 5,
    "default_file": "app.js",  # used for ledger entries without a "file" field
    "context_radius": 2,
    "local_only": False,
    "max_open_prs": 10,
}

SUPPORTED_MODELS = ("openai", "anthropic")


def load_config(config_path: str = ".revfix.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .revfix.yml in the current directory
      3. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        if not isinstance(file_config, dict):
            raise ValidationError(f"{config_path} must contain a mapping, got {type(file_config).__name__}")
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # Resolve credentials from environment variables
    config["github_token"] = os.environ.get("GITHUB_TOKEN")
    config["openai_api_key"] = os.environ.get("OPENAI_API_KEY")
    config["anthropic_api_key"] = os.environ.get("ANTHROPIC_API_KEY")

    return config


def validate_config(config: dict) -> None:
    if config.get("model") not in SUPPORTED_MODELS:
        raise ValidationError(
            f"Unknown model provider: {config.get('model')!r}. Choose one of: {', '.join(SUPPORTED_MODELS)}."
        )
    for key in ("backup_keep", "context_radius", "max_open_prs"):
        value = config.get(key)
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            raise ValidationError(f"{key} must be a non-negative integer, got {value!r}")
