"""Helpers for working with the optional YAML configuration file."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from pdf_grep.errors import ConfigError
from pdf_grep.schema import FinalizationPolicy

CONFIG_ENV_VAR = "PDF_GREP_CONFIG"

DEFAULT_REFRESH_INTERVAL = 0.2
DEFAULT_CONSOLE_WIDTH = 80
DEFAULT_EXTENSIONS = (".pdf",)


class SearchSettings(BaseModel):
    """Tunable settings for a search run."""

    workers: int = Field(default=0, ge=0)
    refresh_interval: float = Field(default=DEFAULT_REFRESH_INTERVAL, gt=0)
    extensions: list[str] = Field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    default_width: int = Field(default=DEFAULT_CONSOLE_WIDTH, ge=1)
    finalization: FinalizationPolicy = FinalizationPolicy.ORDERED
    shuffle_seed: int | None = None

    @field_validator("extensions")
    @classmethod
    def _normalize_extensions(cls, value: list[str]) -> list[str]:
        normalized = []
        for extension in value:
            cleaned = extension.strip().lower()
            if not cleaned:
                continue
            if not cleaned.startswith("."):
                cleaned = f".{cleaned}"
            normalized.append(cleaned)
        if not normalized:
            raise ValueError("At least one file extension is required")
        return normalized


def load_config(path: Path | str) -> dict[str, Any]:
    """Load the YAML configuration."""
    with Path(path).open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def resolve_config_path(path: Path | str | None) -> Path | None:
    """Return the explicit config path, or the one named by the environment."""
    if path:
        return Path(path)
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return None


def load_settings(path: Path | str | None = None) -> SearchSettings:
    """Load and validate settings, falling back to defaults without a file."""
    config_path = resolve_config_path(path)
    if config_path is None:
        return SearchSettings()

    try:
        raw = load_config(config_path)
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {config_path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")

    try:
        return SearchSettings.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid settings in {config_path}: {exc}") from exc
