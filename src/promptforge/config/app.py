"""
Configuration management for PromptForge.

Provides YAML-based configuration with CLI overrides,
configuration hierarchy (CLI > environment > YAML > Defaults), and validation.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator

DEFAULT_CONFIG_FILE = "~/.promptforge/config.yaml"
DEFAULT_PROMPTS_DIRECTORY = "./.product/prompts"
LOG_LEVEL_ENV_VAR = "PROMPTFORGE_LOG_LEVEL"

LogLevel = Literal["debug", "info", "warning", "error"]


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(
        default="info",
        description="Log level",
    )
    format: Literal["text", "json"] = Field(
        default="text",
        description="Log format (text or json)",
    )

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        """Accept level names in any case."""
        if isinstance(v, str):
            return v.strip().lower()
        return v


class PromptForgeConfig(BaseModel):
    """Top-level PromptForge configuration."""

    prompts_directory: str = Field(
        default=DEFAULT_PROMPTS_DIRECTORY,
        description="Directory scanned recursively for .yaml/.yml prompt definitions",
    )
    max_workers: int = Field(
        default=1,
        description="Threads used to read and validate prompt files during a load",
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging configuration",
    )

    @field_validator("max_workers")
    @classmethod
    def validate_max_workers(cls, v: int) -> int:
        """Validate worker count is positive."""
        if v < 1:
            raise ValueError("max_workers must be at least 1")
        return v

    @field_validator("prompts_directory")
    @classmethod
    def validate_prompts_directory(cls, v: str) -> str:
        """Validate the prompts directory is not blank."""
        if not v.strip():
            raise ValueError("prompts_directory must not be empty")
        return v


def load_yaml(config_file: str) -> dict[str, Any]:
    """
    Load YAML or JSON configuration file.

    Args:
        config_file: Path to YAML or JSON configuration file

    Returns:
        Dictionary with parsed YAML/JSON content (empty when the file is missing)

    Raises:
        ValueError: If YAML/JSON is invalid or file format is wrong
    """
    config_path = Path(config_file).expanduser()

    if not config_path.exists():
        return {}

    file_ext = config_path.suffix.lower()
    if file_ext not in [".yaml", ".yml", ".json"]:
        raise ValueError(
            f"Config file must have .yaml, .yml, or .json extension, got: {file_ext}\n"
            f"File: {config_path}"
        )

    try:
        content = config_path.read_text(encoding="utf-8")

        if file_ext == ".json":
            data = json.loads(content) if content.strip() else {}
        else:
            data = yaml.safe_load(content)

    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in config file: {e}") from e
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping at the top level: {config_path}")
    return data


def apply_cli_overrides(
    config_dict: dict[str, Any],
    cli_overrides: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Apply CLI argument overrides to config dictionary.

    Keys may be dotted (``logging.level``) to reach nested sections.
    ``None`` values are skipped so unset CLI options leave the file value alone.
    """
    if cli_overrides is None:
        return config_dict

    for key, value in cli_overrides.items():
        if value is None:
            continue
        parts = key.split(".")
        current = config_dict
        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]
        current[parts[-1]] = value

    return config_dict


def apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """Apply the PROMPTFORGE_LOG_LEVEL environment variable, if set."""
    level = os.environ.get(LOG_LEVEL_ENV_VAR)
    if level:
        return apply_cli_overrides(config_dict, {"logging.level": level})
    return config_dict


def load_config(
    config_file: str | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> PromptForgeConfig:
    """
    Load configuration with hierarchy: CLI > environment > YAML > Defaults.

    Args:
        config_file: Path to YAML config file (default: ~/.promptforge/config.yaml)
        cli_overrides: Dictionary of CLI argument overrides

    Returns:
        Validated PromptForgeConfig instance

    Raises:
        ValueError: If configuration is invalid
    """
    if config_file is None:
        config_file = DEFAULT_CONFIG_FILE

    config_dict = load_yaml(config_file)
    config_dict = apply_env_overrides(config_dict)
    config_dict = apply_cli_overrides(config_dict, cli_overrides)

    try:
        return PromptForgeConfig(**config_dict)
    except Exception as e:
        raise ValueError(
            f"Configuration validation failed: {e}\n"
            f"Please check your configuration file at {config_file}"
        ) from e
