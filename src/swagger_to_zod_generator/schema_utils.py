"""Shared predicates and helpers for schema node shapes."""

from __future__ import annotations

from copy import deepcopy
from typing import Optional

from .json_types import JSONObject, JSONValue, MutableJSONObject


def property_count(schema: JSONObject) -> int:
    """Return how many properties an object schema declares."""
    properties = schema.get("properties")
    return len(properties) if isinstance(properties, dict) else 0


def is_enum_schema(schema: JSONValue) -> bool:
    """Return whether a node carries an ``enum`` list."""
    return isinstance(schema, dict) and isinstance(schema.get("enum"), list)


def is_nested_object(schema: JSONValue) -> bool:
    """Return whether a node is an object with more than one property.

    Args:
        schema (JSONValue): Property schema to inspect.

    Returns:
        bool: Whether the node is worth extracting as a named schema.
    """
    return (
        isinstance(schema, dict)
        and schema.get("type") == "object"
        and property_count(schema) > 1
    )


def is_array_of_objects(schema: JSONValue) -> bool:
    """Return whether a node is an array whose items are nested objects."""
    return (
        isinstance(schema, dict)
        and schema.get("type") == "array"
        and is_nested_object(schema.get("items"))
    )


def is_array_of_enums(schema: JSONValue) -> bool:
    """Return whether a node is an array whose items are an enumeration."""
    return (
        isinstance(schema, dict)
        and schema.get("type") == "array"
        and is_enum_schema(schema.get("items"))
    )


def is_object_schema(schema: JSONObject) -> bool:
    """Return whether a schema behaves as an object schema.

    Args:
        schema (JSONObject): Schema node to inspect.

    Returns:
        bool: Whether object rendering rules should apply.
    """
    if schema.get("type") == "object":
        return True
    if isinstance(schema.get("properties"), dict):
        return True
    all_of = schema.get("allOf")
    if isinstance(all_of, list) and all_of:
        return all(isinstance(item, dict) and is_object_schema(item) for item in all_of)
    return False


def merge_all_of_schema(schema: JSONObject) -> Optional[MutableJSONObject]:
    """Merge an ``allOf`` chain of object schemas into one object schema.

    Args:
        schema (JSONObject): Schema whose ``allOf`` members may all be objects.

    Returns:
        Optional[MutableJSONObject]: Merged schema, or ``None`` when some member
            is not an object schema.
    """
    all_of = schema.get("allOf")
    if not isinstance(all_of, list) or not all_of:
        return None

    merged: MutableJSONObject = {
        key: deepcopy(value) for key, value in schema.items() if key != "allOf"
    }
    own_properties = merged.get("properties")
    own_required = merged.get("required")
    merged_properties: MutableJSONObject = (
        dict(own_properties) if isinstance(own_properties, dict) else {}
    )
    merged_required: list[JSONValue] = list(own_required) if isinstance(own_required, list) else []
    for item in all_of:
        if not isinstance(item, dict) or not is_object_schema(item):
            return None
        child = merge_all_of_schema(item) if "allOf" in item else item
        if child is None:
            return None
        child_properties = child.get("properties")
        if isinstance(child_properties, dict):
            merged_properties.update(deepcopy(child_properties))
        child_required = child.get("required")
        if isinstance(child_required, list):
            merged_required.extend(
                name for name in child_required if name not in merged_required
            )
        if child.get("additionalProperties") is False:
            merged["additionalProperties"] = False

    merged["type"] = "object"
    merged["properties"] = merged_properties
    if merged_required:
        merged["required"] = merged_required
    return merged
