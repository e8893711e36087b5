import os
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG: dict = {
    "model": "anthropic",
    "max_output_tokens": 3000,
    "max_files_in_prompt": 15,
    "patch_chars_in_prompt": 1500,
    "description_chars_in_prompt": 2000,
    "issue_chars_in_prompt": 1000,
}

_API_KEY_SETTING = {
    "anthropic": "anthropic_api_key",
    "openai": "openai_api_key",
}


def load_config(config_path: str = ".prcheck.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .prcheck.yml in the current directory
      3. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # Credentials never come from the config file.
    config["github_token"] = os.environ.get("GITHUB_TOKEN")
    config["anthropic_api_key"] = os.environ.get("ANTHROPIC_API_KEY")
    config["openai_api_key"] = os.environ.get("OPENAI_API_KEY")

    return config


def model_api_key(config: dict) -> Optional[str]:
    """Return the credential for the configured model provider, or None when it is not set."""
    setting = _API_KEY_SETTING.get(config.get("model", ""))
    if setting is None:
        raise ValueError(f"Unknown model provider: {config.get('model')!r}. Choose 'anthropic' or 'openai'.")
    return config.get(setting) or None
