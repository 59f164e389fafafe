"""Tests for configuration loading."""

from pathlib import Path

import pytest

from promptforge.config.app import (
    DEFAULT_PROMPTS_DIRECTORY,
    LoggingSettings,
    PromptForgeConfig,
    apply_cli_overrides,
    load_config,
    load_yaml,
)

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def clear_log_level_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PROMPTFORGE_LOG_LEVEL", raising=False)


class TestPromptForgeConfig:
    def test_defaults(self) -> None:
        config = PromptForgeConfig()

        assert config.prompts_directory == DEFAULT_PROMPTS_DIRECTORY
        assert config.max_workers == 1
        assert config.logging.level == "info"
        assert config.logging.format == "text"

    def test_max_workers_must_be_positive(self) -> None:
        with pytest.raises(ValueError, match="max_workers must be at least 1"):
            PromptForgeConfig(max_workers=0)

    def test_blank_prompts_directory_rejected(self) -> None:
        with pytest.raises(ValueError, match="must not be empty"):
            PromptForgeConfig(prompts_directory="  ")

    def test_level_is_case_insensitive(self) -> None:
        assert LoggingSettings(level="DEBUG").level == "debug"


class TestLoadYaml:
    def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        assert load_yaml(str(tmp_path / "missing.yaml")) == {}

    def test_yaml_and_json(self, tmp_path: Path) -> None:
        yaml_file = tmp_path / "c.yaml"
        yaml_file.write_text("max_workers: 3\n")
        json_file = tmp_path / "c.json"
        json_file.write_text('{"max_workers": 4}')

        assert load_yaml(str(yaml_file)) == {"max_workers": 3}
        assert load_yaml(str(json_file)) == {"max_workers": 4}

    def test_empty_yaml_is_empty(self, tmp_path: Path) -> None:
        config_file = tmp_path / "c.yaml"
        config_file.write_text("")

        assert load_yaml(str(config_file)) == {}

    def test_wrong_extension(self, tmp_path: Path) -> None:
        config_file = tmp_path / "c.toml"
        config_file.write_text("x = 1")

        with pytest.raises(ValueError, match="must have .yaml, .yml, or .json extension"):
            load_yaml(str(config_file))

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "c.yaml"
        config_file.write_text("a: [1\n")

        with pytest.raises(ValueError, match="Invalid YAML"):
            load_yaml(str(config_file))


class TestApplyCliOverrides:
    def test_nested_keys(self) -> None:
        result = apply_cli_overrides({"logging": {"format": "json"}}, {"logging.level": "debug"})

        assert result == {"logging": {"format": "json", "level": "debug"}}

    def test_none_values_are_skipped(self) -> None:
        result = apply_cli_overrides({"max_workers": 2}, {"max_workers": None})

        assert result == {"max_workers": 2}

    def test_no_overrides(self) -> None:
        assert apply_cli_overrides({"a": 1}) == {"a": 1}


class TestLoadConfig:
    def test_hierarchy(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "prompts_directory: /from/file\nmax_workers: 2\nlogging:\n  level: warning\n"
        )

        config = load_config(str(config_file), {"prompts_directory": "/from/cli"})

        assert config.prompts_directory == "/from/cli"
        assert config.max_workers == 2
        assert config.logging.level == "warning"

    def test_env_overrides_file_log_level(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("logging:\n  level: warning\n")
        monkeypatch.setenv("PROMPTFORGE_LOG_LEVEL", "ERROR")

        assert load_config(str(config_file)).logging.level == "error"

    def test_invalid_values_raise_value_error(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("max_workers: 0\n")

        with pytest.raises(ValueError, match="Configuration validation failed"):
            load_config(str(config_file))
