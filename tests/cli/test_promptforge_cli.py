"""Tests for the promptforge CLI."""

import json
from collections.abc import Callable
from pathlib import Path

import pytest
from click.testing import CliRunner, Result

from promptforge.cli import cli
from promptforge.cli.utils import collect_variables, parse_var_string, parse_vars
from promptforge.prompts.models import PromptDefinition
from promptforge.prompts.service import get_default_service

pytestmark = pytest.mark.integration

QUIET = {"PROMPTFORGE_LOG_LEVEL": "error"}


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def invoke(runner: CliRunner, prompts_dir: Path, tmp_path: Path) -> Callable[..., Result]:
    """Invoke the CLI against the sample prompts with an isolated config file."""
    config_file = tmp_path / "config.yaml"
    config_file.write_text("max_workers: 1\n")

    def _invoke(*args: str) -> Result:
        return runner.invoke(
            cli,
            ["--config", str(config_file), "--prompts-dir", str(prompts_dir), *args],
            env=QUIET,
        )

    return _invoke


class TestParseVars:
    def test_string_value(self) -> None:
        assert parse_var_string("language=Go") == ("language", "Go")

    def test_json_values_are_decoded(self) -> None:
        assert parse_vars(["n=3", "flag=true", 'items=["a","b"]']) == {
            "n": 3,
            "flag": True,
            "items": ["a", "b"],
        }

    def test_value_may_contain_equals(self) -> None:
        assert parse_var_string("expr=a=b") == ("expr", "a=b")

    @pytest.mark.parametrize("bad", ["novalue", "=x"])
    def test_invalid_format(self, bad: str) -> None:
        with pytest.raises(ValueError):
            parse_var_string(bad)

    def test_declared_string_types_stay_raw(self) -> None:
        prompt = PromptDefinition.model_validate(
            {
                "name": "release-notes",
                "title": "Release Notes",
                "description": "Summarise a release",
                "template": "{{version}} {{count}}",
                "variables": [
                    {"name": "version", "type": "text"},
                    {"name": "count", "type": "number"},
                ],
            }
        )

        assert parse_vars(["version=1.0", "count=3", "other=true"], prompt) == {
            "version": "1.0",
            "count": 3,
            "other": True,
        }

    def test_collect_precedence(self, tmp_path: Path) -> None:
        vars_file = tmp_path / "vars.yaml"
        vars_file.write_text("a: file\nb: file\nc: file\n")

        result = collect_variables(("c=flag",), '{"b": "json", "c": "json"}', str(vars_file))

        assert result == {"a": "file", "b": "json", "c": "flag"}

    def test_collect_rejects_non_mapping_json(self) -> None:
        with pytest.raises(ValueError, match="must be a mapping"):
            collect_variables((), "[1, 2]")


class TestValidateCommand:
    def test_all_valid(self, invoke: Callable[..., Result]) -> None:
        result = invoke("validate")

        assert result.exit_code == 0
        assert "Loaded:    3" in result.output
        assert "Failed:    0" in result.output

    def test_failures_exit_nonzero(
        self, invoke: Callable[..., Result], prompts_dir: Path, write_prompt: Callable[..., Path]
    ) -> None:
        write_prompt("broken.yaml", "name: [oops\n", prompts_dir)

        result = invoke("validate")

        assert result.exit_code == 1
        assert "Failed:    1" in result.output
        assert "broken.yaml" in result.output

    def test_json_output(self, invoke: Callable[..., Result]) -> None:
        result = invoke("validate", "--json")

        data = json.loads(result.output)
        assert data["total_files"] == 3
        assert data["successful_loads"] == 3


class TestQueryCommands:
    def test_list(self, invoke: Callable[..., Result]) -> None:
        result = invoke("list")

        assert result.exit_code == 0
        assert "Found 3 prompt(s)" in result.output
        assert "code-review [development] - Code Review" in result.output

    def test_list_filtered_json(self, invoke: Callable[..., Result]) -> None:
        result = invoke("list", "--category", "development", "--tag", "git", "--json")

        assert [p["name"] for p in json.loads(result.output)] == ["commit-message"]

    def test_categories(self, invoke: Callable[..., Result]) -> None:
        result = invoke("categories")

        assert result.output.splitlines() == ["development", "documentation"]

    def test_search(self, invoke: Callable[..., Result]) -> None:
        result = invoke("search", "CODE", "--json")

        assert [p["name"] for p in json.loads(result.output)] == ["code-review"]

    def test_search_no_match(self, invoke: Callable[..., Result]) -> None:
        result = invoke("search", "zzz")

        assert "No prompts match 'zzz'." in result.output

    def test_show(self, invoke: Callable[..., Result]) -> None:
        result = invoke("show", "code-review")

        assert result.exit_code == 0
        assert "Prompt: code-review" in result.output
        assert "language (enum, required) one of: Python, Go, Rust" in result.output
        assert "Language: {{language}}" in result.output

    def test_show_missing(self, invoke: Callable[..., Result]) -> None:
        result = invoke("show", "nope")

        assert result.exit_code == 1
        assert "Prompt not found: nope" in result.output


class TestRenderCommand:
    def test_render(self, invoke: Callable[..., Result]) -> None:
        result = invoke("render", "code-review", "--var", "language=Go", "--var", "focus=style")

        assert result.exit_code == 0
        assert result.output == "Language: Go\nFocus: style\n\n"

    def test_render_vars_json(self, invoke: Callable[..., Result]) -> None:
        result = invoke("render", "commit-message", "--vars-json", '{"summary": "add cli"}')

        assert result.exit_code == 0
        assert result.output.strip() == "feat: add cli"

    def test_render_numeric_looking_text(self, invoke: Callable[..., Result]) -> None:
        result = invoke("render", "commit-message", "--var", "summary=1.0")

        assert result.exit_code == 0
        assert result.output == "feat: 1.0\n"

    def test_render_validation_errors(self, invoke: Callable[..., Result]) -> None:
        result = invoke("render", "code-review", "--var", "language=Cobol")

        assert result.exit_code == 1
        assert "Variable 'language' must be one of: Python, Go, Rust" in result.output

    def test_render_unknown_prompt(self, invoke: Callable[..., Result]) -> None:
        result = invoke("render", "nope")

        assert result.exit_code == 1
        assert "Prompt not found: nope" in result.output

    def test_render_bad_var_format(self, invoke: Callable[..., Result]) -> None:
        result = invoke("render", "code-review", "--var", "language")

        assert result.exit_code == 2
        assert "expected key=value" in result.output


class TestGlobalOptions:
    def test_invalid_config_is_reported(self, runner: CliRunner, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("max_workers: 0\n")

        result = runner.invoke(cli, ["--config", str(config_file), "categories"], env=QUIET)

        assert result.exit_code == 1
        assert "Configuration validation failed" in result.output

    def test_commands_use_configured_default_service(
        self, invoke: Callable[..., Result], prompts_dir: Path
    ) -> None:
        result = invoke("categories")

        assert result.exit_code == 0
        service = get_default_service()
        assert service.prompts_directory == prompts_dir
        assert service.categories() == ["development", "documentation"]
