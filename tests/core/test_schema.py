# tests/core/test_schema.py
from __future__ import annotations

import jsonschema
import pytest
from pydantic import BaseModel

from agentstack.core.errors import SchemaValidationError
from agentstack.core.schema import FieldViolation, Schema, ValidatedPayload


class Hero(BaseModel):
    name: str
    powers: list[str]
    rescues: int | None = None


HERO_JSON_SCHEMA = {
    "type": "object",
    "title": "Hero",
    "properties": {
        "name": {"type": "string"},
        "rescues": {"type": "integer", "minimum": 0},
    },
    "required": ["name"],
}


class TestPydanticSchema:
    def test_valid_payload_returns_typed_value(self):
        result = Schema(Hero).validate({"name": "A", "powers": ["flight"]})

        assert result.ok
        assert isinstance(result.value, Hero)
        assert result.value.name == "A"

    def test_invalid_payload_collects_every_violation(self):
        result = Schema(Hero).validate({"powers": "flight"})

        assert not result.ok
        assert result.value is None
        assert result.kind == "validation"
        locs = {e.loc for e in result.errors}
        assert locs == {"name", "powers"}

    def test_nested_loc_is_dotted(self):
        result = Schema(Hero).validate({"name": "A", "powers": ["ok", 3]})

        assert [e.loc for e in result.errors] == ["powers.1"]

    def test_dump_omits_unset_optionals(self):
        schema = Schema(Hero)
        value = schema.require({"name": "A", "powers": []})

        assert schema.dump(value) == {"name": "A", "powers": []}

    def test_dump_keeps_explicit_values(self):
        schema = Schema(Hero)
        value = schema.require({"name": "A", "powers": [], "rescues": 0})

        assert schema.dump(value) == {"name": "A", "powers": [], "rescues": 0}

    def test_non_model_types(self):
        schema = Schema(list[int])

        assert schema.validate([1, 2]).value == [1, 2]
        assert not schema.validate(["x"]).ok

    def test_json_schema_export(self):
        exported = Schema(Hero).json_schema()

        assert exported["title"] == "Hero"
        assert set(exported["required"]) == {"name", "powers"}

    def test_name(self):
        assert Schema(Hero).name == "Hero"


class TestJsonSchema:
    def test_valid(self):
        result = Schema(HERO_JSON_SCHEMA).validate({"name": "A", "rescues": 1})

        assert result.ok
        assert result.value == {"name": "A", "rescues": 1}

    def test_invalid_reports_paths(self):
        result = Schema(HERO_JSON_SCHEMA).validate({"rescues": -1})

        assert not result.ok
        by_type = {e.type: e for e in result.errors}
        assert set(by_type) == {"required", "minimum"}
        assert by_type["minimum"].loc == "rescues"

    def test_invalid_schema_rejected(self):
        with pytest.raises(jsonschema.SchemaError):
            Schema({"type": "not-a-type"})

    def test_json_schema_passthrough(self):
        assert Schema(HERO_JSON_SCHEMA).json_schema() == HERO_JSON_SCHEMA
        assert Schema(HERO_JSON_SCHEMA).name == "Hero"


class TestUnwrap:
    def test_unwrap_ok(self):
        assert ValidatedPayload(value=1).unwrap() == 1

    def test_unwrap_raises_with_diagnostics(self):
        errors = tuple(FieldViolation(loc=f"f{i}", message="bad", type="t") for i in range(5))
        payload = ValidatedPayload(errors=errors, kind="validation")

        with pytest.raises(SchemaValidationError) as exc_info:
            payload.unwrap("apiClient.add_hero")

        err = exc_info.value
        assert err.errors == list(errors)
        assert err.context == "apiClient.add_hero"
        assert "Validation error in apiClient.add_hero" in str(err)
        assert "and 2 more" in str(err)

    def test_coerce(self):
        schema = Schema(Hero)

        assert Schema.coerce(None) is None
        assert Schema.coerce(schema) is schema
        assert isinstance(Schema.coerce(Hero), Schema)
