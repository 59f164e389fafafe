"""Structural validation of decoded prompt files.

Runs the decoded mapping through the PromptDefinition model and turns every
pydantic error into a PromptValidationError naming the offending field path.
All violations for a file are reported together.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from promptforge.prompts.models import PromptDefinition, PromptValidationError

# Keys the loader owns; a file cannot set them.
_RESERVED_KEYS = ("source_path",)


@dataclass
class SchemaResult:
    """Typed definition on success, field-level errors on failure."""

    prompt: PromptDefinition | None = None
    errors: list[PromptValidationError] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return self.prompt is not None and not self.errors


def format_location(loc: tuple[int | str, ...]) -> str:
    """Join a pydantic error location into a dotted path (``variables.0.type``)."""
    return ".".join(str(part) for part in loc)


def validate_schema(data: dict[str, Any], file_path: str | Path) -> SchemaResult:
    """Validate a decoded mapping against the prompt file schema.

    Args:
        data: Mapping produced by the parser
        file_path: Source file, recorded on every error

    Returns:
        SchemaResult with the definition or every structural violation
    """
    file_str = str(file_path)
    payload = {k: v for k, v in data.items() if k not in _RESERVED_KEYS}

    try:
        prompt = PromptDefinition.model_validate(payload)
    except ValidationError as exc:
        return SchemaResult(errors=_convert_errors(exc, file_str))

    return SchemaResult(prompt=prompt)


def _convert_errors(exc: ValidationError, file_path: str) -> list[PromptValidationError]:
    errors: list[PromptValidationError] = []
    for err in exc.errors(include_url=False):
        location = format_location(err["loc"])
        message = f"{location}: {err['msg']}" if location else err["msg"]
        errors.append(
            PromptValidationError(
                file=file_path,
                field=location or None,
                message=message,
                kind="schema",
            )
        )
    return errors
