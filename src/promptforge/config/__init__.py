"""Configuration for PromptForge."""

from promptforge.config.app import (
    LoggingSettings,
    PromptForgeConfig,
    apply_cli_overrides,
    apply_env_overrides,
    load_config,
    load_yaml,
)

__all__ = [
    "LoggingSettings",
    "PromptForgeConfig",
    "apply_cli_overrides",
    "apply_env_overrides",
    "load_config",
    "load_yaml",
]
