"""Shared helpers for CLI commands."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import click
import yaml

from promptforge.prompts.models import PromptDefinition
from promptforge.prompts.service import PromptService, get_default_service

# Declared types whose --var values are always taken verbatim
STRING_TYPES = frozenset({"text", "enum"})


def _decode(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def parse_var_string(var_string: str, decode: bool = True) -> tuple[str, Any]:
    """Parse a 'key=value' string into (key, value).

    With ``decode`` the value is decoded as JSON when possible so numbers,
    booleans and arrays can be passed on the command line; anything else
    stays a string.

    Raises:
        ValueError: If string is not in key=value format
    """
    if "=" not in var_string:
        raise ValueError(f"Invalid variable format (expected key=value): {var_string}")

    key, raw = var_string.split("=", 1)
    key = key.strip()
    raw = raw.strip()

    if not key:
        raise ValueError(f"Empty variable name in: {var_string}")

    return key, _decode(raw) if decode else raw


def parse_vars(
    var_list: list[str] | tuple[str, ...], prompt: PromptDefinition | None = None
) -> dict[str, Any]:
    """Parse a list of 'key=value' strings into a dict (later keys win).

    Values for variables the prompt declares as text or enum stay raw
    strings, so ``--var version=1.0`` keeps the text ``1.0``.
    """
    result: dict[str, Any] = {}
    for var_string in var_list:
        key, raw = parse_var_string(var_string, decode=False)
        variable = prompt.get_variable(key) if prompt is not None else None
        if variable is not None and variable.type in STRING_TYPES:
            result[key] = raw
        else:
            result[key] = _decode(raw)
    return result


def _require_mapping(data: Any, source: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ValueError(f"Variables from {source} must be a mapping")
    return data


def collect_variables(
    var_list: tuple[str, ...],
    vars_json: str | None = None,
    vars_file: str | None = None,
    prompt: PromptDefinition | None = None,
) -> dict[str, Any]:
    """Merge variables from --vars-file, --vars-json and --var (in that order).

    Raises:
        ValueError: If any source is malformed
    """
    variables: dict[str, Any] = {}

    if vars_file:
        try:
            data = yaml.safe_load(Path(vars_file).read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid variables file {vars_file}: {e}") from e
        variables.update(_require_mapping(data or {}, vars_file))

    if vars_json:
        try:
            data = json.loads(vars_json)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON for --vars-json: {e}") from e
        variables.update(_require_mapping(data, "--vars-json"))

    variables.update(parse_vars(var_list, prompt))
    return variables


def get_service(ctx: click.Context) -> PromptService:
    """Return the default service, loading it on first use within a command."""
    service: PromptService | None = ctx.obj.get("service")
    if service is None:
        service = get_default_service()
        service.load()
        ctx.obj["service"] = service
    return service


def print_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, default=str))
