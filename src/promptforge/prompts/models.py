"""Prompt definition models.

Pydantic models for the YAML prompt file format, plus the plain dataclasses
used to report load outcomes. Definitions are frozen: once a file passes
validation the resulting PromptDefinition is never mutated.

Primitive fields use pydantic's strict types so that ambiguous YAML values
(``required: "yes"``, ``name: 42``) are rejected rather than coerced.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
)

from promptforge.prompts.errors import (
    CrossReferenceError,
    FileSystemError,
    ParseError,
    SchemaValidationError,
)

VariableType = Literal["text", "number", "boolean", "enum", "array"]
ErrorKind = Literal["filesystem", "parse", "schema", "cross_reference"]


class VariableSpec(BaseModel):
    """A typed input slot that a prompt template may reference."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: StrictStr = Field(description="Variable name, unique within its prompt")
    type: VariableType = Field(description="Value type expected at render time")
    required: StrictBool = Field(default=False, description="Must be supplied when rendering")
    description: StrictStr | None = Field(default=None, description="Human-readable help text")
    default: Any = Field(default=None, description="Value used when the caller omits it")
    values: tuple[StrictStr, ...] | None = Field(
        default=None, description="Allowed values (enum only)"
    )
    suggestions: tuple[StrictStr, ...] | None = Field(
        default=None, description="Example values shown to users"
    )
    max_length: StrictInt | None = Field(default=None, description="Maximum length (text only)")
    min: StrictFloat | None = Field(default=None, description="Lower bound (number only)")
    max: StrictFloat | None = Field(default=None, description="Upper bound (number only)")


class Example(BaseModel):
    """A worked example of variable values for a prompt."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    title: StrictStr
    variables: dict[StrictStr, Any] = Field(default_factory=dict)
    expected_output: StrictStr | None = None


class PromptDefinition(BaseModel):
    """A validated prompt template with its metadata and variable declarations.

    Attributes:
        name: Unique identifier used to look the prompt up.
        title: Human-friendly title.
        description: Short summary of what the prompt does.
        category: Optional grouping (e.g. ``code-review``).
        tags: Unordered labels used for filtering and search.
        variables: Declared variables, in file order.
        examples: Worked examples; their keys must name declared variables.
        template: Handlebars template body.
        source_path: File the definition was loaded from (set by the loader).
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: StrictStr = Field(description="Unique prompt identifier")
    title: StrictStr = Field(description="Human-readable prompt title")
    description: StrictStr = Field(description="Prompt description")
    category: StrictStr | None = Field(default=None, description="Prompt category")
    tags: frozenset[StrictStr] = Field(default_factory=frozenset, description="Tags")
    variables: tuple[VariableSpec, ...] = Field(default=(), description="Declared variables")
    examples: tuple[Example, ...] = Field(default=(), description="Usage examples")
    template: StrictStr = Field(description="Handlebars template body")
    source_path: str | None = Field(default=None, description="Originating file")

    @property
    def variable_names(self) -> list[str]:
        return [v.name for v in self.variables]

    @property
    def required_variables(self) -> list[str]:
        return [v.name for v in self.variables if v.required]

    @property
    def optional_variables(self) -> list[str]:
        return [v.name for v in self.variables if not v.required]

    def get_variable(self, name: str) -> VariableSpec | None:
        """Return the declared variable called ``name``, if any."""
        for variable in self.variables:
            if variable.name == name:
                return variable
        return None

    def variable_info(self) -> dict[str, Any]:
        """Summarise declared variables for display to callers."""
        return {
            "variables": [
                {
                    "name": v.name,
                    "type": v.type,
                    "required": v.required,
                    "description": v.description,
                }
                for v in self.variables
            ],
            "required": self.required_variables,
            "optional": self.optional_variables,
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary (tags sorted)."""
        data = self.model_dump(mode="json", exclude_none=True)
        data["tags"] = sorted(self.tags)
        return data


@dataclass(frozen=True)
class PromptValidationError:
    """A single problem found while loading a prompt file.

    Pure report: it names the file, optionally the dotted field path, and a
    human-readable message.
    """

    file: str
    message: str
    field: str | None = None
    kind: ErrorKind = "schema"

    def __str__(self) -> str:
        return f"{self.file}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "field": self.field,
            "message": self.message,
            "kind": self.kind,
        }


@dataclass
class LoadResult:
    """Outcome of loading a single prompt file."""

    success: bool
    prompt: PromptDefinition | None = None
    errors: list[PromptValidationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @classmethod
    def ok(cls, prompt: PromptDefinition, warnings: list[str] | None = None) -> LoadResult:
        return cls(success=True, prompt=prompt, warnings=list(warnings or []))

    @classmethod
    def failed(
        cls, errors: list[PromptValidationError], warnings: list[str] | None = None
    ) -> LoadResult:
        return cls(success=False, errors=list(errors), warnings=list(warnings or []))

    def raise_for_errors(self) -> PromptDefinition:
        """Return the prompt, or raise the exception matching the first error kind."""
        if self.success and self.prompt is not None:
            return self.prompt

        path = self.errors[0].file if self.errors else None
        kind = self.errors[0].kind if self.errors else "schema"
        if kind == "filesystem":
            raise FileSystemError(self.errors[0].message, path)
        if kind == "parse":
            raise ParseError(self.errors[0].message, path)
        if kind == "cross_reference":
            raise CrossReferenceError(self.errors, path)
        raise SchemaValidationError(self.errors, path)


@dataclass(frozen=True)
class LoadStats:
    """Aggregate statistics for one full directory load."""

    total_files: int = 0
    successful_loads: int = 0
    failed_loads: int = 0
    errors: tuple[PromptValidationError, ...] = ()
    warnings: tuple[str, ...] = ()
    directory: str | None = None
    loaded_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "directory": self.directory,
            "total_files": self.total_files,
            "successful_loads": self.successful_loads,
            "failed_loads": self.failed_loads,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": list(self.warnings),
            "loaded_at": self.loaded_at.isoformat() if self.loaded_at else None,
        }


@dataclass
class LoadReport:
    """Result of loading a directory: accepted definitions plus every error."""

    definitions: list[PromptDefinition] = field(default_factory=list)
    errors: list[PromptValidationError] = field(default_factory=list)
    stats: LoadStats = field(default_factory=LoadStats)

    @property
    def success(self) -> bool:
        return not self.errors
