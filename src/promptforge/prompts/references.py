"""Cross-reference validation for schema-valid prompt definitions.

Checks that a definition is internally consistent:

- variable names are unique
- enum variables declare at least one value
- every variable the template references is declared
- every example only sets declared variables

Template references are found by tokenising each ``{{ ... }}`` mustache.
This is a best-effort static check, not a full Handlebars parse:

- ``{{name}}``, ``{{#if name}}``, ``{{#unless name}}``, ``{{#each name}}``
  and ``{{#with name}}`` reference ``name``
- the first token of a helper call (``{{capitalize language}}``) is the
  helper and is skipped; bare identifiers passed as its arguments are
  references, literals and hash keys are not
- the engine's own ``lookup`` and ``log`` helpers are skipped the same way
- inside ``{{#each}}``/``{{#with}}`` bodies names resolve against the block
  context, so they are collected separately and never reported
- ``this``, ``.``, ``../parent`` and ``@data`` paths are ignored; for a
  dotted path (``user.name``) the head segment is the reference

Problems that do not make a definition unusable are reported as warnings.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from promptforge.prompts.helpers import HELPER_NAMES
from promptforge.prompts.models import PromptDefinition, PromptValidationError

_COMMENT = re.compile(r"\{\{~?!--.*?--~?\}\}|\{\{~?!.*?\}\}", re.DOTALL)
_MUSTACHE = re.compile(r"\{\{\{?(.*?)\}?\}\}", re.DOTALL)
_TOKEN = re.compile(
    r"""[^\s()"'=]+=(?:"(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*'|[^\s()]+)"""
    r"""|"(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*'|[()]|[^\s()]+"""
)
_IDENTIFIER = re.compile(r"^[A-Za-z_][\w-]*$")
_NUMBER = re.compile(r"^-?\d+(?:\.\d+)?$")
_PATH_SEPARATOR = re.compile(r"[./\[]")
_LITERALS = frozenset({"true", "false", "null", "undefined"})

BUILTIN_BLOCK_HELPERS = frozenset({"if", "unless", "each", "with"})
SCOPED_BLOCK_HELPERS = frozenset({"each", "with"})
BUILTIN_INLINE_HELPERS = frozenset({"lookup", "log"})

PROMPT_NAME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9_-]*$")
CATEGORY_PATTERN = re.compile(r"^[a-z][a-z0-9-]*$")


@dataclass
class ValidationResult:
    """Errors and warnings collected by a validation pass.

    Errors make a definition unacceptable; warnings never do.
    """

    errors: list[PromptValidationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def add_error(self, file: str, message: str, field_path: str | None = None) -> None:
        self.errors.append(
            PromptValidationError(
                file=file, field=field_path, message=message, kind="cross_reference"
            )
        )

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    def merge(self, other: ValidationResult) -> None:
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": list(self.warnings),
        }


@dataclass
class TemplateReferences:
    """Names found in a template, split by how they resolve."""

    variables: set[str] = field(default_factory=set)
    scoped: set[str] = field(default_factory=set)
    helpers: set[str] = field(default_factory=set)

    @property
    def all_names(self) -> set[str]:
        return self.variables | self.scoped


def validate_prompt_name(name: str) -> bool:
    """Prompt names should be identifier-like (``code-review``, ``api_docs``)."""
    return bool(PROMPT_NAME_PATTERN.match(name))


def validate_category(category: str) -> bool:
    """Categories should be kebab-case."""
    return bool(CATEGORY_PATTERN.match(category))


def _reference_head(token: str) -> str | None:
    """Return the variable a value token refers to, or None for literals and context paths."""
    if token.startswith(("'", '"')) or token in _LITERALS or _NUMBER.match(token):
        return None
    if token in (".", "this") or token.startswith(("this.", "this/", "./", "../", "@")):
        return None
    head = _PATH_SEPARATOR.split(token, 1)[0]
    if not _IDENTIFIER.match(head):
        return None
    return head


def _collect_expression(tokens: list[str], refs: set[str], helpers: set[str]) -> None:
    """Collect references from a helper argument list, including subexpressions."""
    expect_helper = False
    for token in tokens:
        if token == "(":
            expect_helper = True
            continue
        if token == ")":
            continue
        if expect_helper:
            expect_helper = False
            helpers.add(token)
            continue
        if "=" in token and not token.startswith(("'", '"')):
            token = token.split("=", 1)[1]
        head = _reference_head(token)
        if head is not None:
            refs.add(head)


def extract_template_references(template: str) -> TemplateReferences:
    """Tokenise every mustache in ``template`` and classify the names it uses."""
    result = TemplateReferences()
    # Block stack: (name, opens_new_scope)
    stack: list[tuple[str, bool]] = []
    scoped_depth = 0

    body = _COMMENT.sub("", template)
    for match in _MUSTACHE.finditer(body):
        content = match.group(1).strip().strip("~").strip()
        if not content or content.startswith((">", "!")):
            continue
        if content in ("else", "^"):
            continue

        refs = result.scoped if scoped_depth else result.variables

        if content.startswith("/"):
            name = content[1:].strip()
            if stack and stack[-1][0] == name:
                _, scoped = stack.pop()
                if scoped:
                    scoped_depth -= 1
            continue

        if content.startswith(("#", "^")):
            inverted = content.startswith("^")
            tokens = _TOKEN.findall(content[1:].strip())
            if not tokens:
                continue
            name, args = tokens[0], tokens[1:]
            if not inverted and (name in BUILTIN_BLOCK_HELPERS or name in HELPER_NAMES):
                if name in HELPER_NAMES:
                    result.helpers.add(name)
                _collect_expression(args, refs, result.helpers)
                opens_scope = name in SCOPED_BLOCK_HELPERS
            else:
                # Plain section: {{#items}} / {{^items}}
                head = _reference_head(name)
                if head is not None:
                    refs.add(head)
                opens_scope = not inverted
            stack.append((name, opens_scope))
            if opens_scope:
                scoped_depth += 1
            continue

        tokens = _TOKEN.findall(content)
        if not tokens:
            continue
        name, args = tokens[0], tokens[1:]
        if name in HELPER_NAMES or name in BUILTIN_INLINE_HELPERS:
            result.helpers.add(name)
        else:
            head = _reference_head(name)
            if head is not None:
                refs.add(head)
        _collect_expression(args, refs, result.helpers)

    return result


def extract_template_variables(template: str) -> set[str]:
    """Return the variable names a template references at its top level."""
    return extract_template_references(template).variables


def validate_references(prompt: PromptDefinition, file_path: str | Path) -> ValidationResult:
    """Check the semantic invariants of a structurally valid definition.

    Args:
        prompt: Definition produced by the schema validator
        file_path: Source file, recorded on every error

    Returns:
        ValidationResult with every violation and lint warning
    """
    file_str = str(file_path)
    result = ValidationResult()

    # Unique variable names
    seen: set[str] = set()
    reported: set[str] = set()
    for variable in prompt.variables:
        if variable.name in seen and variable.name not in reported:
            result.add_error(file_str, f"Duplicate variable name: {variable.name}", "variables")
            reported.add(variable.name)
        seen.add(variable.name)

    # Enum variables need values
    for variable in prompt.variables:
        if variable.type == "enum" and not variable.values:
            result.add_error(
                file_str,
                f"Enum variable '{variable.name}' must have at least one value",
                f"variables.{variable.name}",
            )

    # Template references
    declared = set(prompt.variable_names)
    references = extract_template_references(prompt.template)
    for name in sorted(references.variables - declared):
        result.add_error(
            file_str, f"Template references undefined variable: {{{{{name}}}}}", "template"
        )

    # Example variables
    for example in prompt.examples:
        for key in example.variables:
            if key not in declared:
                result.add_error(
                    file_str,
                    f"Example '{example.title}' uses undefined variable: {key}",
                    f"examples.{example.title}",
                )

    result.merge(_lint(prompt, references))
    return result


def _lint(prompt: PromptDefinition, references: TemplateReferences) -> ValidationResult:
    result = ValidationResult()

    if not validate_prompt_name(prompt.name):
        result.add_warning(
            f"Prompt name '{prompt.name}' should start with a letter and contain only "
            "letters, digits, '-' or '_'"
        )
    if prompt.category is not None and not validate_category(prompt.category):
        result.add_warning(f"Category '{prompt.category}' should be kebab-case")

    used = references.all_names
    for variable in prompt.variables:
        name = variable.name
        if variable.max_length is not None and variable.type != "text":
            result.add_warning(f"Variable '{name}': max_length only applies to text variables")
        if (variable.min is not None or variable.max is not None) and variable.type != "number":
            result.add_warning(f"Variable '{name}': min/max only apply to number variables")
        if (
            variable.min is not None
            and variable.max is not None
            and variable.min > variable.max
        ):
            result.add_warning(f"Variable '{name}': min is greater than max")
        if variable.values is not None and variable.type != "enum":
            result.add_warning(f"Variable '{name}': values only apply to enum variables")
        if (
            variable.type == "enum"
            and variable.values
            and variable.default is not None
            and variable.default not in variable.values
        ):
            result.add_warning(f"Variable '{name}': default is not one of its values")
        if name in HELPER_NAMES or name in BUILTIN_INLINE_HELPERS:
            result.add_warning(
                f"Variable '{name}' shares its name with a template helper and "
                "cannot be interpolated directly"
            )
        if name not in used:
            result.add_warning(f"Variable '{name}' is declared but never used in the template")

    return result
