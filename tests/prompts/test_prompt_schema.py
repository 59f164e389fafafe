"""Tests for structural validation of decoded prompt files."""

from typing import Any

import pytest

from promptforge.prompts.models import PromptDefinition
from promptforge.prompts.schema import format_location, validate_schema

pytestmark = pytest.mark.unit


def _valid_data(**overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "name": "greet",
        "title": "Greeting",
        "description": "Say hello",
        "template": "Hello {{who}}",
        "variables": [{"name": "who", "type": "text", "required": True}],
    }
    data.update(overrides)
    return data


class TestValidateSchema:
    """Tests for validate_schema()."""

    def test_valid_definition(self) -> None:
        result = validate_schema(_valid_data(tags=["b", "a"]), "greet.yaml")

        assert result.valid
        assert isinstance(result.prompt, PromptDefinition)
        assert result.prompt.tags == frozenset({"a", "b"})
        assert result.prompt.variables[0].required is True
        assert result.errors == []

    def test_optional_fields_default(self) -> None:
        data = _valid_data()
        del data["variables"]

        result = validate_schema(data, "greet.yaml")

        assert result.prompt is not None
        assert result.prompt.category is None
        assert result.prompt.tags == frozenset()
        assert result.prompt.variables == ()
        assert result.prompt.examples == ()

    def test_missing_required_fields_all_reported(self) -> None:
        """Every missing field is reported, not just the first."""
        result = validate_schema({"name": "x"}, "x.yaml")

        assert result.prompt is None
        fields = {e.field for e in result.errors}
        assert {"title", "description", "template"} <= fields
        assert all(e.file == "x.yaml" for e in result.errors)
        assert all(e.kind == "schema" for e in result.errors)

    def test_unknown_variable_type_names_field_path(self) -> None:
        data = _valid_data(variables=[{"name": "who", "type": "string"}])

        result = validate_schema(data, "greet.yaml")

        assert not result.valid
        assert result.errors[0].field == "variables.0.type"
        assert result.errors[0].message.startswith("variables.0.type:")

    def test_ambiguous_scalars_are_not_coerced(self) -> None:
        data = _valid_data(
            name=42, variables=[{"name": "who", "type": "text", "required": "yes"}]
        )

        result = validate_schema(data, "greet.yaml")

        fields = {e.field for e in result.errors}
        assert "name" in fields
        assert "variables.0.required" in fields

    def test_integer_bounds_accepted_for_number_variables(self) -> None:
        data = _valid_data(
            template="{{count}}",
            variables=[{"name": "count", "type": "number", "min": 1, "max": 10}],
        )

        result = validate_schema(data, "count.yaml")

        assert result.prompt is not None
        assert result.prompt.variables[0].min == 1
        assert result.prompt.variables[0].max == 10

    def test_source_path_cannot_be_set_by_file(self) -> None:
        result = validate_schema(_valid_data(source_path="/etc/passwd"), "greet.yaml")

        assert result.prompt is not None
        assert result.prompt.source_path is None

    def test_unknown_keys_are_ignored(self) -> None:
        result = validate_schema(_valid_data(author="someone"), "greet.yaml")

        assert result.valid


class TestFormatLocation:
    def test_joins_parts(self) -> None:
        assert format_location(("variables", 0, "type")) == "variables.0.type"

    def test_empty(self) -> None:
        assert format_location(()) == ""
