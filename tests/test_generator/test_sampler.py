"""Tests for openapi_import.generator.sampler."""

from __future__ import annotations

import pytest

from openapi_import.generator.sampler import (
    NIL_UUID,
    PLACEHOLDER_EMAIL,
    flatten_schema_to_rows,
    sample_to_text,
    schema_kind,
    schema_type,
    synthesize,
)
from openapi_import.models import SchemaKind
from openapi_import.parser.resolver import RefResolver


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


class TestSchemaKind:
    @pytest.mark.parametrize(
        "schema, kind",
        [
            ({"type": "object"}, SchemaKind.OBJECT),
            ({"properties": {}}, SchemaKind.OBJECT),
            ({"type": "array"}, SchemaKind.ARRAY),
            ({"items": {"type": "string"}}, SchemaKind.ARRAY),
            ({"type": "string"}, SchemaKind.PRIMITIVE),
            ({"type": "integer"}, SchemaKind.PRIMITIVE),
            ({"type": "boolean"}, SchemaKind.PRIMITIVE),
            ({"anyOf": [{"type": "string"}]}, SchemaKind.COMBINATOR),
            ({"oneOf": [{"type": "string"}]}, SchemaKind.COMBINATOR),
            ({"allOf": [{"type": "string"}]}, SchemaKind.COMBINATOR),
            ({"$ref": "#/x", "circular": True}, SchemaKind.REFERENCE),
            ({"description": "nothing useful"}, SchemaKind.UNKNOWN),
            ({"type": "null"}, SchemaKind.UNKNOWN),
            ({"anyOf": []}, SchemaKind.UNKNOWN),
            (None, SchemaKind.UNKNOWN),
            ("string", SchemaKind.UNKNOWN),
        ],
    )
    def test_classification(self, schema, kind) -> None:
        assert schema_kind(schema) is kind

    def test_type_wins_over_combinators(self) -> None:
        assert schema_kind({"type": "object", "oneOf": [{"type": "string"}]}) is SchemaKind.OBJECT

    def test_openapi_31_type_list(self) -> None:
        assert schema_type({"type": ["null", "integer"]}) == "integer"
        assert schema_type({"type": ["null"]}) is None


# ---------------------------------------------------------------------------
# synthesize
# ---------------------------------------------------------------------------


class TestSynthesizePrecedence:
    def test_const_first(self) -> None:
        assert synthesize({"const": 7, "enum": [1], "default": 2, "example": 3}) == 7

    def test_falsy_const_still_wins(self) -> None:
        assert synthesize({"type": "integer", "const": 0, "default": 5}) == 0

    def test_enum_before_default(self) -> None:
        assert synthesize({"type": "string", "enum": ["a", "b"], "default": "z"}) == "a"

    def test_default_before_example(self) -> None:
        assert synthesize({"type": "string", "default": "d", "example": "e"}) == "d"

    def test_explicit_null_default(self) -> None:
        assert synthesize({"type": "string", "default": None}) is None

    def test_example_before_type(self) -> None:
        assert synthesize({"type": "integer", "example": 42}) == 42

    def test_empty_enum_ignored(self) -> None:
        assert synthesize({"type": "integer", "enum": []}) == 0


class TestSynthesizeTypes:
    def test_uuid_is_nil(self) -> None:
        assert synthesize({"type": "string", "format": "uuid"}) == NIL_UUID
        assert NIL_UUID == "00000000-0000-0000-0000-000000000000"

    def test_email(self) -> None:
        assert synthesize({"type": "string", "format": "email"}) == PLACEHOLDER_EMAIL

    def test_plain_string(self) -> None:
        assert synthesize({"type": "string"}) == "string"

    @pytest.mark.parametrize("kind", ["integer", "number"])
    def test_numbers(self, kind: str) -> None:
        assert synthesize({"type": kind}) == 0

    def test_boolean(self) -> None:
        assert synthesize({"type": "boolean"}) is False

    def test_date_time_uses_clock(self, fixed_clock) -> None:
        value = synthesize({"type": "string", "format": "date-time"}, clock=fixed_clock)
        assert value == "2024-01-02T03:04:05.678Z"

    def test_date_uses_clock(self, fixed_clock) -> None:
        assert synthesize({"type": "string", "format": "date"}, clock=fixed_clock) == "2024-01-02"

    def test_object(self) -> None:
        assert synthesize({"type": "object", "properties": {"a": {"type": "integer"}}}) == {"a": 0}

    def test_object_without_properties(self) -> None:
        assert synthesize({"type": "object"}) == {}

    def test_object_with_malformed_properties(self) -> None:
        assert synthesize({"type": "object", "properties": ["a"]}) == {}

    def test_inferred_object(self) -> None:
        assert synthesize({"properties": {"ok": {"type": "boolean"}}}) == {"ok": False}

    def test_array(self) -> None:
        assert synthesize({"type": "array", "items": {"type": "string"}}) == ["string"]

    def test_array_without_items(self) -> None:
        assert synthesize({"type": "array"}) == [None]

    def test_nested(self) -> None:
        schema = {
            "type": "object",
            "properties": {
                "id": {"type": "string", "format": "uuid"},
                "tags": {"type": "array", "items": {"type": "string", "enum": ["x"]}},
                "owner": {"type": "object", "properties": {"email": {"type": "string", "format": "email"}}},
            },
        }
        assert synthesize(schema) == {
            "id": NIL_UUID,
            "tags": ["x"],
            "owner": {"email": PLACEHOLDER_EMAIL},
        }

    def test_type_list(self) -> None:
        assert synthesize({"type": ["string", "null"]}) == "string"


class TestSynthesizeCombinators:
    def test_any_of_first_branch(self) -> None:
        assert synthesize({"anyOf": [{"type": "integer"}, {"type": "string"}]}) == 0

    def test_one_of_first_branch(self) -> None:
        assert synthesize({"oneOf": [{"type": "boolean"}, {"type": "string"}]}) is False

    def test_any_of_before_one_of(self) -> None:
        assert synthesize({"oneOf": [{"type": "string"}], "anyOf": [{"type": "integer"}]}) == 0

    def test_all_of_merges_object_samples(self) -> None:
        schema = {
            "allOf": [
                {"type": "object", "properties": {"a": {"type": "integer"}}},
                {"type": "object", "properties": {"b": {"type": "string"}}},
            ]
        }
        assert synthesize(schema) == {"a": 0, "b": "string"}


class TestSynthesizeDegenerate:
    @pytest.mark.parametrize("schema", [None, {}, "string", 3, [], {"description": "x"}])
    def test_returns_none(self, schema) -> None:
        assert synthesize(schema) is None

    def test_circular_sentinel_is_none(self) -> None:
        assert synthesize({"$ref": "#/components/schemas/Node", "circular": True}) is None

    def test_depth_cap(self) -> None:
        schema: dict = {"type": "string"}
        for _ in range(12):
            schema = {"type": "object", "properties": {"child": schema}}
        value = synthesize(schema)
        depth = 0
        while isinstance(value, dict):
            value = value["child"]
            depth += 1
        assert value is None
        assert depth == 9

    def test_custom_depth(self) -> None:
        schema = {"type": "object", "properties": {"a": {"type": "object", "properties": {"b": {"type": "integer"}}}}}
        assert synthesize(schema, max_depth=1) == {"a": {"b": None}}
        assert synthesize(schema, max_depth=0) == {"a": None}

    def test_cyclic_document_terminates(self, cyclic_doc) -> None:
        schema = RefResolver(cyclic_doc).resolve({"$ref": "#/components/schemas/Node"})
        assert synthesize(schema) == {"value": "string", "next": None}

    def test_identity_cycle_stops_at_depth(self) -> None:
        node: dict = {"type": "object", "properties": {}}
        node["properties"]["self"] = node
        value = synthesize(node)
        depth = 0
        while isinstance(value, dict):
            value = value["self"]
            depth += 1
        assert value is None

    def test_deterministic(self) -> None:
        schema = {"type": "object", "properties": {"a": {"type": "string", "format": "uuid"}}}
        assert synthesize(schema) == synthesize(schema)


# ---------------------------------------------------------------------------
# Cell rendering and row flattening
# ---------------------------------------------------------------------------


class TestSampleToText:
    def test_none_is_empty(self) -> None:
        assert sample_to_text({}) == ""

    def test_boolean_is_json(self) -> None:
        assert sample_to_text({"type": "boolean"}) == "false"

    def test_container_is_compact_json(self) -> None:
        assert sample_to_text({"type": "array", "items": {"type": "integer"}}) == "[0]"

    def test_scalar(self) -> None:
        assert sample_to_text({"type": "integer"}) == "0"


class TestFlattenSchemaToRows:
    def test_object_properties_become_rows(self) -> None:
        schema = {"type": "object", "properties": {"status": {"type": "string"}, "limit": {"type": "integer"}}}
        assert flatten_schema_to_rows("filter", schema) == [("status", ""), ("limit", "")]

    def test_nested_objects_expand_in_place(self) -> None:
        schema = {
            "type": "object",
            "properties": {
                "page": {"type": "object", "properties": {"size": {"type": "integer"}}},
                "q": {"type": "string"},
            },
        }
        assert flatten_schema_to_rows("f", schema) == [("size", ""), ("q", "")]

    def test_empty_object_keeps_base_name(self) -> None:
        assert flatten_schema_to_rows("f", {"type": "object", "properties": {}}) == [("f", "")]

    def test_primitive_is_single_sample_row(self) -> None:
        assert flatten_schema_to_rows("n", {"type": "integer"}) == [("n", "0")]
