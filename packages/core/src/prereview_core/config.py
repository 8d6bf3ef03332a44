import os
from pathlib import Path
from typing import Optional

import yaml

from prereview_core.errors import ConfigurationError
from prereview_core.models import ModelId, ReviewRequest

DEFAULT_SYSTEM_PROMPT = """You are an expert code reviewer.
Analyze the provided pull request and provide detailed, constructive feedback.
Focus on:
- Potential bugs and security issues
- Look for potential fat-fingers
- Don't be long winded, and focus on 1-3 key issues.
"""

DEFAULT_CONFIG: dict = {
    "model": "anthropic/claude-sonnet-4-20250514",
    "model_url": None,  # None = provider SDK default endpoint
    "system_prompt": None,  # None or blank = DEFAULT_SYSTEM_PROMPT
    "system_prompt_addition": "",
    "max_input_tokens": 10_000,
    "max_output_tokens": 5_000,
    "line_offset": 1,
}


def load_config(config_path: str = ".prereview.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .prereview.yml in the current directory
      3. CLI argument overrides (click resolves their environment variables)
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    # Credentials come from the environment unless a flag overrides them.
    config["github_token"] = os.environ.get("GITHUB_TOKEN")
    config["model_key"] = os.environ.get("PREREVIEW_MODEL_KEY")

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    return config


def parse_repository(value: str) -> tuple[str, str]:
    owner, sep, repo = (value or "").partition("/")
    if not sep or not owner or not repo:
        raise ConfigurationError(f"invalid repository format: {value!r} (expected owner/repo)")
    return owner, repo


def parse_model(value: str) -> ModelId:
    provider, sep, name = (value or "").partition("/")
    if not sep or not provider or not name:
        raise ConfigurationError(f"invalid model format: {value!r} (expected provider/name)")
    return ModelId(provider=provider, name=name)


def compose_system_prompt(system_prompt: Optional[str], addition: Optional[str] = None) -> str:
    """Fall back to the built-in prompt when blank, then append the addition."""
    if not system_prompt or not system_prompt.strip():
        system_prompt = DEFAULT_SYSTEM_PROMPT
    return (system_prompt + "\n" + (addition or "")).strip()


def _as_int(config: dict, key: str) -> int:
    value = config.get(key)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{key} must be an integer, got {value!r}")


def get_line_offset(config: dict) -> int:
    return _as_int(config, "line_offset")


def build_request(config: dict) -> ReviewRequest:
    """Validate the merged config and freeze it into a ReviewRequest."""
    owner, repo = parse_repository(config.get("repository", ""))
    model = parse_model(config.get("model", ""))

    if config.get("pr_number") is None:
        raise ConfigurationError("pr_number is required")
    pr_number = _as_int(config, "pr_number")
    if pr_number <= 0:
        raise ConfigurationError(f"pr_number must be positive, got {pr_number}")

    return ReviewRequest(
        owner=owner,
        repository=repo,
        pr_number=pr_number,
        model=model,
        system_prompt=compose_system_prompt(config.get("system_prompt"), config.get("system_prompt_addition")),
        max_input_tokens=_as_int(config, "max_input_tokens"),
        max_output_tokens=_as_int(config, "max_output_tokens"),
    )
