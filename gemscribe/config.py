"""
gemscribe.config - YAML config loading and validation.

Handles locating gemscribe.yaml, applying defaults, and validating all
parameters.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from gemscribe.exceptions import ConfigError

CONFIG_FILENAME = "gemscribe.yaml"

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com"

KNOWN_MODELS: dict[str, dict[str, Any]] = {
    "gemini-2.0-flash": {
        "name": "Gemini 2.0 Flash",
        "tier": "standard",
    },
    "gemini-2.5-flash": {
        "name": "Gemini 2.5 Flash",
        "tier": "standard",
    },
    "gemini-2.5-pro": {
        "name": "Gemini 2.5 Pro",
        "tier": "pro",
    },
}


class GemscribeConfig(BaseModel):
    """Resolved configuration for gemscribe."""

    model: str = "gemini-2.5-pro"
    base_url: str = DEFAULT_BASE_URL
    request_timeout: float | None = Field(default=None, gt=0.0)

    poll_max_attempts: int = Field(default=30, gt=0)
    poll_interval: float = Field(default=1.0, ge=0.0)

    output_dir: Path = Path("~/Documents/gemscribe")
    prompts_dir: Path | None = None

    max_chars_per_caption: int = Field(default=20, gt=0)
    speaker_labels: bool = True
    remove_filler_words: bool = True
    dictionary_search: bool = True

    config_path: Path | None = None

    @field_validator("model")
    @classmethod
    def validate_model(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("model must not be empty")
        return v.strip()

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return v.rstrip("/")


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find gemscribe.yaml by walking up from start_dir."""
    current = (start_dir or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.exists():
            return candidate
        if current == current.parent:
            return None
        current = current.parent


def load_config(start_dir: Path | None = None) -> GemscribeConfig:
    """Load and validate configuration.

    Uses the nearest gemscribe.yaml at or above start_dir; falls back to
    defaults when no config file exists.

    Raises:
        ConfigError: If the file is unreadable or fails validation
    """
    config_file = find_config_file(start_dir)
    if config_file is None:
        return GemscribeConfig()

    try:
        with open(config_file, encoding="utf-8") as f:
            raw_config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read {config_file}: {e}") from e

    if not isinstance(raw_config, dict):
        raise ConfigError(f"{config_file} must contain a mapping")

    raw_config["config_path"] = config_file
    try:
        return GemscribeConfig(**raw_config)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {config_file}:\n{e}") from e


def create_default_config() -> dict[str, Any]:
    """Create a default config dict suitable for writing to YAML."""
    defaults = GemscribeConfig()
    return {
        "model": defaults.model,
        "output_dir": str(defaults.output_dir),
        "max_chars_per_caption": defaults.max_chars_per_caption,
        "speaker_labels": defaults.speaker_labels,
        "remove_filler_words": defaults.remove_filler_words,
        "dictionary_search": defaults.dictionary_search,
        "poll_max_attempts": defaults.poll_max_attempts,
        "poll_interval": defaults.poll_interval,
    }


def write_config(config: dict[str, Any], path: Path) -> None:
    """Write configuration to a YAML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)
