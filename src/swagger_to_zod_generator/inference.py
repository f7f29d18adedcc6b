"""Infer JSON-Schema-like shapes from example values."""

from __future__ import annotations

from collections.abc import Mapping

from .json_types import JSONValue, MutableJSONObject


def infer_schema(value: JSONValue) -> MutableJSONObject:
    """Derive a schema node describing the shape of ``value``.

    Arrays are described by their first element only. Object keys whose
    value is ``None`` are left out of ``required``.

    Args:
        value (JSONValue): Parsed JSON value.

    Returns:
        MutableJSONObject: Inferred schema node.
    """
    if value is None:
        return {"type": "null"}

    if isinstance(value, list):
        items: MutableJSONObject = infer_schema(value[0]) if value else {}
        return {"type": "array", "items": items}

    if isinstance(value, bool):
        return {"type": "boolean"}
    if isinstance(value, str):
        return {"type": "string"}
    if isinstance(value, int):
        return {"type": "integer"}
    if isinstance(value, float):
        return {"type": "integer"} if value.is_integer() else {"type": "number"}

    if isinstance(value, Mapping):
        properties: MutableJSONObject = {}
        required: list[JSONValue] = []
        for key, item in value.items():
            properties[key] = infer_schema(item)
            if item is not None:
                required.append(key)
        return {"type": "object", "properties": properties, "required": required}

    return {}
