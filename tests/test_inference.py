"""Unit tests for schema inference from example values."""

from __future__ import annotations

import pytest

from swagger_to_zod_generator.inference import infer_schema
from swagger_to_zod_generator.json_types import JSONValue


@pytest.mark.parametrize(
    ("value", "expected_type"),
    [
        (None, "null"),
        ("s", "string"),
        (3, "integer"),
        (3.0, "integer"),
        (3.5, "number"),
        (True, "boolean"),
        ([], "array"),
        ({}, "object"),
    ],
)
def test_primitive_types_match_runtime_kind(value: JSONValue, expected_type: str) -> None:
    """Each JSON kind maps to its schema type."""
    assert infer_schema(value)["type"] == expected_type


def test_empty_array_has_empty_items() -> None:
    """Empty arrays carry an unconstrained items schema."""
    assert infer_schema([]) == {"type": "array", "items": {}}


def test_array_items_come_from_first_element_only() -> None:
    """Later elements do not influence the inferred item shape."""
    schema = infer_schema([{"a": 1}, {"b": "x"}])

    assert schema["items"] == {
        "type": "object",
        "properties": {"a": {"type": "integer"}},
        "required": ["a"],
    }


def test_required_lists_keys_with_non_null_values() -> None:
    """Keys holding ``None`` are optional; every other key is required."""
    schema = infer_schema({"id": 1, "nickname": None, "tags": [], "active": False})

    assert schema["required"] == ["id", "tags", "active"]
    assert schema["properties"] == {
        "id": {"type": "integer"},
        "nickname": {"type": "null"},
        "tags": {"type": "array", "items": {}},
        "active": {"type": "boolean"},
    }


def test_inference_is_deterministic() -> None:
    """The same input always yields the same schema."""
    value = {"b": {"c": [1.5]}, "a": "x"}

    assert infer_schema(value) == infer_schema(value)
    assert list(infer_schema(value)["properties"]) == ["b", "a"]
