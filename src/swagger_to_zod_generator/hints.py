"""Merge externally supplied optionality hints into inferred schemas."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from copy import deepcopy

from .json_types import JSONValue, MutableJSONObject

type OptionalFieldHint = Callable[[tuple[str, ...], str], bool]
"""Answer whether field ``name`` under schema path ``path`` is shown as optional."""


def apply_presentation_hints(
    schema: MutableJSONObject,
    is_optional: OptionalFieldHint,
) -> MutableJSONObject:
    """Demote fields the rendered view marks optional from ``required``.

    Nested objects and objects inside arrays are visited too; array items
    share the path of the property holding the array.

    Args:
        schema (MutableJSONObject): Inferred schema node.
        is_optional (OptionalFieldHint): Optionality judgment per field.

    Returns:
        MutableJSONObject: New schema with hinted fields made optional.
    """
    return _apply(deepcopy(schema), is_optional, path=())


def optional_fields_hint(fields: Iterable[str]) -> OptionalFieldHint:
    """Build a hint from field names or dotted field paths.

    A bare name such as ``"nickname"`` matches at any depth; a dotted path
    such as ``"address.city"`` matches only that location.

    Args:
        fields (Iterable[str]): Names or dotted paths of optional fields.

    Returns:
        OptionalFieldHint: Hint callable for :func:`apply_presentation_hints`.
    """
    names: set[str] = set()
    dotted_paths: set[tuple[str, ...]] = set()
    for entry in fields:
        parts = tuple(part for part in entry.split(".") if part)
        if len(parts) == 1:
            names.add(parts[0])
        elif parts:
            dotted_paths.add(parts)

    def _is_optional(path: tuple[str, ...], name: str) -> bool:
        return name in names or (*path, name) in dotted_paths

    return _is_optional


def _apply(
    schema: MutableJSONObject,
    is_optional: OptionalFieldHint,
    *,
    path: tuple[str, ...],
) -> MutableJSONObject:
    properties = schema.get("properties")
    if schema.get("type") != "object" or not isinstance(properties, dict) or not properties:
        return schema

    optional_keys: set[str] = set()
    for key, prop_schema in properties.items():
        if is_optional(path, key):
            optional_keys.add(key)
        if not isinstance(prop_schema, dict):
            continue

        child_path = (*path, key)
        if prop_schema.get("type") == "object":
            properties[key] = _apply(prop_schema, is_optional, path=child_path)
        elif prop_schema.get("type") == "array":
            items = prop_schema.get("items")
            if isinstance(items, dict) and items.get("type") == "object":
                prop_schema["items"] = _apply(items, is_optional, path=child_path)

    raw_required = schema.get("required")
    required: list[JSONValue] = list(raw_required) if isinstance(raw_required, list) else []
    required = [name for name in required if name not in optional_keys]
    if required:
        schema["required"] = required
    else:
        schema.pop("required", None)
    return schema
