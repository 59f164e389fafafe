"""Exception taxonomy for the prompt pipeline.

Load-time exceptions (FileSystemError, ParseError, SchemaValidationError,
CrossReferenceError) are raised inside the loader stages and converted into
PromptValidationError records at the loader boundary. Render-time exceptions
(VariableValidationError, RenderError) are only raised on request, via
RenderResult.raise_for_errors().
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from promptforge.prompts.models import PromptValidationError


class PromptForgeError(Exception):
    """Base class for all prompt pipeline errors."""


class FileSystemError(PromptForgeError):
    """A path could not be read."""

    def __init__(self, message: str, path: str | Path | None = None):
        self.path = str(path) if path else None
        super().__init__(f"{message}" + (f": {path}" if path else ""))


class ParseError(PromptForgeError):
    """File content could not be decoded into a mapping."""

    def __init__(
        self,
        message: str,
        path: str | Path | None = None,
        line: int | None = None,
        column: int | None = None,
    ):
        self.path = str(path) if path else None
        self.line = line
        self.column = column
        self.message = message
        location = ""
        if line is not None:
            location = f" (line {line}" + (f", column {column}" if column is not None else "") + ")"
        super().__init__(f"{message}{location}")


class _ErrorListMixin:
    errors: list[PromptValidationError]

    def _summary(self, message: str) -> str:
        if not self.errors:
            return message
        details = "; ".join(e.message for e in self.errors)
        return f"{message}: {details}"


class SchemaValidationError(_ErrorListMixin, PromptForgeError):
    """One or more structural field violations in a definition file."""

    def __init__(self, errors: list[PromptValidationError], path: str | Path | None = None):
        self.errors = list(errors)
        self.path = str(path) if path else None
        super().__init__(self._summary("Schema validation failed"))


class CrossReferenceError(_ErrorListMixin, PromptForgeError):
    """Semantic inconsistency between template, variables and examples."""

    def __init__(self, errors: list[PromptValidationError], path: str | Path | None = None):
        self.errors = list(errors)
        self.path = str(path) if path else None
        super().__init__(self._summary("Cross-reference validation failed"))


class VariableValidationError(PromptForgeError):
    """Caller-supplied variables do not satisfy the declared variables."""

    def __init__(self, messages: list[str], prompt_name: str | None = None):
        self.messages = list(messages)
        self.prompt_name = prompt_name
        prefix = f"Invalid variables for '{prompt_name}'" if prompt_name else "Invalid variables"
        super().__init__(f"{prefix}: {'; '.join(self.messages)}")


class RenderError(PromptForgeError):
    """The substitution engine failed to compile or evaluate a template."""

    def __init__(self, message: str, prompt_name: str | None = None):
        self.message = message
        self.prompt_name = prompt_name
        super().__init__(message)


class PromptNotFoundError(PromptForgeError, LookupError):
    """No cached prompt has the requested name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Prompt not found: {name}")
