"""Render prompt definitions with Handlebars templating.

Rendering runs in two strictly ordered phases:

1. Variable validation - every declared variable is checked against the
   caller's values and all problems are collected (no fail-fast).
2. Substitution - only when phase 1 found nothing, the template is compiled
   with pybars and evaluated with the fixed helper library.

A render never raises: the result carries either the rendered text or the
ordered list of error messages.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Literal

from pybars import Compiler

from promptforge.prompts.errors import (
    PromptNotFoundError,
    RenderError,
    VariableValidationError,
)
from promptforge.prompts.helpers import pybars_helpers, to_display_string
from promptforge.prompts.models import PromptDefinition, VariableSpec

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass(frozen=True)
class VariableIssue:
    """A single problem with a caller-supplied variable."""

    variable: str
    message: str
    expected: str | None = None
    provided: Any = None


@dataclass
class VariableCheck:
    """Outcome of phase 1."""

    errors: list[VariableIssue] = field(default_factory=list)
    unknown: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


@dataclass
class RenderResult:
    """Rendered text on success, error messages on failure - never both."""

    success: bool
    rendered: str | None = None
    errors: list[str] = field(default_factory=list)
    error_kind: Literal["variables", "render", "not_found"] | None = None
    unknown_variables: list[str] = field(default_factory=list)

    def raise_for_errors(self, prompt_name: str | None = None) -> str:
        """Return the rendered text or raise the matching exception."""
        if self.success and self.rendered is not None:
            return self.rendered
        if self.error_kind == "not_found":
            raise PromptNotFoundError(prompt_name or "")
        if self.error_kind == "render":
            raise RenderError("; ".join(self.errors), prompt_name)
        raise VariableValidationError(self.errors, prompt_name)


def _format_bound(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def _is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def check_variable(variable: VariableSpec, value: Any) -> VariableIssue | None:
    """Apply the type rule for ``variable`` to a supplied (non-null) value."""
    name = variable.name

    if variable.type == "text":
        if not isinstance(value, str):
            return VariableIssue(name, f"Variable '{name}' must be a string", "string", value)
        if variable.max_length is not None and len(value) > variable.max_length:
            return VariableIssue(
                name,
                f"Variable '{name}' exceeds maximum length of {variable.max_length}",
                f"string with max length {variable.max_length}",
                value,
            )

    elif variable.type == "number":
        if not _is_number(value) or (isinstance(value, float) and not math.isfinite(value)):
            return VariableIssue(name, f"Variable '{name}' must be a number", "number", value)
        if variable.min is not None and value < variable.min:
            bound = _format_bound(variable.min)
            return VariableIssue(
                name, f"Variable '{name}' must be at least {bound}", f"number >= {bound}", value
            )
        if variable.max is not None and value > variable.max:
            bound = _format_bound(variable.max)
            return VariableIssue(
                name, f"Variable '{name}' must be at most {bound}", f"number <= {bound}", value
            )

    elif variable.type == "boolean":
        if not isinstance(value, bool):
            return VariableIssue(name, f"Variable '{name}' must be a boolean", "boolean", value)

    elif variable.type == "enum":
        if not isinstance(value, str):
            return VariableIssue(
                name, f"Variable '{name}' must be a string for enum type", "string", value
            )
        allowed = variable.values or ()
        if value not in allowed:
            options = ", ".join(allowed)
            return VariableIssue(
                name, f"Variable '{name}' must be one of: {options}", f"one of: {options}", value
            )

    elif variable.type == "array":
        if not isinstance(value, list | tuple):
            return VariableIssue(name, f"Variable '{name}' must be an array", "array", value)

    return None


_STANDALONE_TAG = re.compile(
    r"^[ \t]*(\{\{(?:[#^/!][^{}]*|else(?:\s[^{}]*)?)\}\})[ \t]*(?:\r?\n|$)", re.MULTILINE
)
_TILDE_AFTER = re.compile(r"~\}\}\s*")
_TILDE_BEFORE = re.compile(r"\s*\{\{~")


class HandlebarsCompiler(Compiler):
    """pybars compiler with Handlebars' standalone-line rules.

    A block open/close, ``else`` or comment tag alone on its line drops that
    line's indentation and its own line break. The preceding line break is
    always kept.
    """

    def whitespace_control(self, source: str) -> str:
        source = _STANDALONE_TAG.sub(r"\1", source)
        source = _TILDE_AFTER.sub("}}", source)
        return _TILDE_BEFORE.sub("{{", source)


class DisplayList(list):
    """A list that interpolates the way Handlebars prints arrays (``a,b``)."""

    def __str__(self) -> str:
        return to_display_string(list(self))


def _display_value(value: Any) -> Any:
    if isinstance(value, list | tuple):
        return DisplayList(_display_value(item) for item in value)
    if isinstance(value, dict):
        return {key: _display_value(item) for key, item in value.items()}
    return value


def _block_helper_missing(this: Any, options: Any, context: Any) -> Any:
    """Section semantics for ``{{#name}}`` blocks that are not helpers."""
    if callable(context):
        context = context(this)
    if context != "" and not context:
        return options["inverse"](this)
    if isinstance(context, list | tuple):
        return options["helpers"]["each"](this, options, list(context))
    if context is True:
        return options["fn"](this)
    return options["fn"](context)


@lru_cache(maxsize=256)
def compile_template(template: str) -> Callable[..., Any]:
    """Compile a Handlebars template (memoised per template text)."""
    return HandlebarsCompiler().compile(template)


class TemplateRenderer:
    """Validate variables and render prompt templates.

    Example usage:
        ```python
        renderer = TemplateRenderer()
        result = renderer.render(prompt, {"language": "Go"})
        if result.success:
            print(result.rendered)
        else:
            for message in result.errors:
                print(message)
        ```
    """

    def __init__(self, helpers: Mapping[str, Callable[..., Any]] | None = None):
        self._helpers = dict(helpers) if helpers is not None else pybars_helpers()
        self._helpers.setdefault("blockHelperMissing", _block_helper_missing)

    def validate_variables(
        self, prompt: PromptDefinition, variables: Mapping[str, Any]
    ) -> VariableCheck:
        """Check supplied values against the prompt's declarations (phase 1)."""
        check = VariableCheck()

        for variable in prompt.variables:
            value = variables.get(variable.name, _MISSING)

            if variable.required and (value is _MISSING or value is None or value == ""):
                check.errors.append(
                    VariableIssue(
                        variable.name,
                        f"missing required variable '{variable.name}'",
                        variable.type,
                        None if value is _MISSING else value,
                    )
                )
                continue

            if value is _MISSING or value is None:
                continue

            issue = check_variable(variable, value)
            if issue is not None:
                check.errors.append(issue)

        declared = set(prompt.variable_names)
        for key in variables:
            if key not in declared:
                check.unknown.append(key)
                logger.warning(f"Unknown variable '{key}' supplied for prompt '{prompt.name}'")

        return check

    def build_context(
        self, prompt: PromptDefinition, variables: Mapping[str, Any]
    ) -> dict[str, Any]:
        """Caller values plus declared defaults for omitted optional variables.

        Lists are wrapped so ``{{files}}`` prints ``a,b`` as Handlebars does.
        """
        context = dict(variables)
        for variable in prompt.variables:
            if context.get(variable.name) is None and variable.default is not None:
                context[variable.name] = variable.default
        return {key: _display_value(value) for key, value in context.items()}

    def render(
        self, prompt: PromptDefinition, variables: Mapping[str, Any] | None = None
    ) -> RenderResult:
        """Validate ``variables`` and render ``prompt``.

        Args:
            prompt: Accepted prompt definition
            variables: Caller-supplied values by variable name

        Returns:
            RenderResult with the text, or every variable error, or a single
            template rendering error
        """
        variables = variables or {}
        logger.debug(f"Rendering prompt '{prompt.name}' with {len(variables)} variables")

        check = self.validate_variables(prompt, variables)
        if not check.valid:
            return RenderResult(
                success=False,
                errors=[issue.message for issue in check.errors],
                error_kind="variables",
                unknown_variables=check.unknown,
            )

        context = self.build_context(prompt, variables)
        try:
            template = compile_template(prompt.template)
            rendered = str(template(context, helpers=self._helpers))
        except Exception as e:
            logger.error(f"Failed to render template for '{prompt.name}': {e}", exc_info=True)
            return RenderResult(
                success=False,
                errors=[f"Template rendering error: {e}"],
                error_kind="render",
                unknown_variables=check.unknown,
            )

        logger.debug(f"Rendered prompt '{prompt.name}' ({len(rendered)} characters)")
        return RenderResult(success=True, rendered=rendered, unknown_variables=check.unknown)
