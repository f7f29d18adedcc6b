"""Render schema nodes as Zod declarations."""

from __future__ import annotations

from collections.abc import Mapping
import json
import re
from typing import Any

from .extraction import REF_HASH_KEY, REF_ITEMS_HASH_KEY, ExtractionTable
from .json_types import JSONValue, MutableJSONObject
from .schema_utils import is_object_schema, merge_all_of_schema

ZOD_IMPORT = 'import { z } from "zod";'

_JS_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
_STRICT_MODIFIER = ".strict()"
_STRICT_OR_STRING_RE = re.compile(r'"(?:[^"\\]|\\.)*"|\.strict\(\)')
_ANY = "z.any()"

_STRING_FORMATS: dict[str, str] = {
    "date-time": ".datetime()",
    "date": ".date()",
    "email": ".email()",
    "uuid": ".uuid()",
    "uri": ".url()",
}


def emit_module(table: ExtractionTable, root: MutableJSONObject, main_name: str) -> str:
    """Render every extracted schema and the root as one Zod module.

    Args:
        table (ExtractionTable): Named table of extracted sub-schemas.
        root (MutableJSONObject): Processed root schema with reference markers.
        main_name (str): Identifier bound to the root schema.

    Returns:
        str: Unformatted TypeScript source without strictness modifiers.
    """
    names = table.names()
    parts: list[str] = [ZOD_IMPORT]
    for entry in table.entries.values():
        if entry.final_name is None:
            continue
        parts.append(render_declaration(entry.final_name, entry.schema, names))
    parts.append(render_declaration(main_name, root, names))
    return "\n\n".join(parts) + "\n"


def render_declaration(name: str, schema: JSONValue, names: Mapping[str, str]) -> str:
    """Render ``export const <name> = <expression>;`` for one schema."""
    expression = strip_strict_modifiers(render_zod_expression(schema, names))
    return f"export const {name} = {expression};"


def strip_strict_modifiers(source: str) -> str:
    """Remove ``.strict()`` so generated objects accept unknown keys.

    String literals are skipped, so descriptions and patterns keep their text.
    """
    return _STRICT_OR_STRING_RE.sub(_drop_strict_modifier, source)


def _drop_strict_modifier(match: re.Match[str]) -> str:
    text = match.group(0)
    return "" if text == _STRICT_MODIFIER else text


def render_zod_expression(schema: JSONValue, names: Mapping[str, str]) -> str:
    """Translate a schema node into a Zod expression.

    Args:
        schema (JSONValue): Schema node, possibly holding reference markers.
        names (Mapping[str, str]): Content hash to identifier map.

    Returns:
        str: Zod expression source.
    """
    if schema is True:
        return _ANY
    if schema is False:
        return "z.never()"
    if not isinstance(schema, Mapping):
        return _ANY

    ref_hash = schema.get(REF_HASH_KEY)
    if isinstance(ref_hash, str):
        return names.get(ref_hash, _ANY)

    base = _render_base(schema, names)
    return base + _common_modifiers(schema)


def _render_base(schema: Mapping[str, Any], names: Mapping[str, str]) -> str:
    items_hash = schema.get(REF_ITEMS_HASH_KEY)
    if isinstance(items_hash, str):
        return f"z.array({names.get(items_hash, _ANY)})" + _array_modifiers(schema)

    if "$ref" in schema:
        return _ANY
    if "const" in schema:
        return f"z.literal({_literal(schema['const'])})"
    if isinstance(schema.get("enum"), list):
        return _render_enum(schema["enum"])

    for combinator in ("anyOf", "oneOf"):
        options = schema.get(combinator)
        if isinstance(options, list) and options:
            return _render_union([render_zod_expression(option, names) for option in options])

    all_of = schema.get("allOf")
    if isinstance(all_of, list) and all_of:
        return _render_all_of(schema, all_of, names)

    schema_type = schema.get("type")
    if isinstance(schema_type, list):
        members = [
            _render_typed(schema, member, names) for member in schema_type if isinstance(member, str)
        ]
        return _render_union(members) if members else _ANY
    if isinstance(schema_type, str):
        return _render_typed(schema, schema_type, names)
    if isinstance(schema.get("properties"), dict):
        return _render_typed(schema, "object", names)
    if "items" in schema:
        return _render_typed(schema, "array", names)
    return _ANY


def _render_typed(schema: Mapping[str, Any], schema_type: str, names: Mapping[str, str]) -> str:
    if schema_type == "string":
        return "z.string()" + _string_modifiers(schema)
    if schema_type == "integer":
        return "z.number().int()" + _number_modifiers(schema)
    if schema_type == "number":
        return "z.number()" + _number_modifiers(schema)
    if schema_type == "boolean":
        return "z.boolean()"
    if schema_type == "null":
        return "z.null()"
    if schema_type == "object":
        return _render_object(schema, names)
    if schema_type == "array":
        return _render_array(schema, names)
    return _ANY


def _render_object(schema: Mapping[str, Any], names: Mapping[str, str]) -> str:
    properties = schema.get("properties")
    additional = schema.get("additionalProperties")

    if not isinstance(properties, dict):
        if isinstance(additional, dict):
            return f"z.record(z.string(), {render_zod_expression(additional, names)})"
        return f"z.record(z.string(), {_ANY})"

    raw_required = schema.get("required")
    required = (
        {name for name in raw_required if isinstance(name, str)}
        if isinstance(raw_required, list)
        else set()
    )
    fields: list[str] = []
    for key, prop_schema in properties.items():
        expression = render_zod_expression(prop_schema, names)
        if key not in required:
            expression += ".optional()"
        fields.append(f"{_property_key(key)}: {expression}")

    rendered = "z.object({ " + ", ".join(fields) + " })" if fields else "z.object({})"
    if additional is False:
        rendered += _STRICT_MODIFIER
    elif isinstance(additional, dict):
        rendered += f".catchall({render_zod_expression(additional, names)})"
    return rendered


def _render_array(schema: Mapping[str, Any], names: Mapping[str, str]) -> str:
    items = schema.get("items")
    if isinstance(items, list):
        members = ", ".join(render_zod_expression(item, names) for item in items)
        return f"z.tuple([{members}])"
    item_expression = render_zod_expression(items, names) if isinstance(items, dict) else _ANY
    return f"z.array({item_expression})" + _array_modifiers(schema)


def _render_all_of(
    schema: Mapping[str, Any],
    all_of: list[JSONValue],
    names: Mapping[str, str],
) -> str:
    if is_object_schema(schema):
        merged = merge_all_of_schema(schema)
        if merged is not None:
            return _render_object(merged, names)

    expressions = [render_zod_expression(member, names) for member in all_of]
    rendered = expressions[0]
    for expression in expressions[1:]:
        rendered = f"z.intersection({rendered}, {expression})"
    return rendered


def _render_enum(values: list[JSONValue]) -> str:
    if not values:
        return "z.never()"
    if len(values) == 1:
        return f"z.literal({_literal(values[0])})"
    if all(isinstance(value, str) for value in values):
        return "z.enum([" + ", ".join(_literal(value) for value in values) + "])"
    return _render_union([f"z.literal({_literal(value)})" for value in values])


def _render_union(options: list[str]) -> str:
    if len(options) == 1:
        return options[0]
    return "z.union([" + ", ".join(options) + "])"


def _string_modifiers(schema: Mapping[str, Any]) -> str:
    modifiers = ""
    string_format = schema.get("format")
    if isinstance(string_format, str):
        modifiers += _STRING_FORMATS.get(string_format, "")
    if _is_number(schema.get("minLength")):
        modifiers += f".min({schema['minLength']})"
    if _is_number(schema.get("maxLength")):
        modifiers += f".max({schema['maxLength']})"
    if isinstance(schema.get("pattern"), str):
        modifiers += f".regex(new RegExp({_literal(schema['pattern'])}))"
    return modifiers


def _number_modifiers(schema: Mapping[str, Any]) -> str:
    modifiers = ""
    minimum = schema.get("minimum")
    maximum = schema.get("maximum")
    exclusive_minimum = schema.get("exclusiveMinimum")
    exclusive_maximum = schema.get("exclusiveMaximum")

    if _is_number(exclusive_minimum):
        modifiers += f".gt({exclusive_minimum})"
    elif _is_number(minimum):
        modifiers += f".gt({minimum})" if exclusive_minimum is True else f".gte({minimum})"
    if _is_number(exclusive_maximum):
        modifiers += f".lt({exclusive_maximum})"
    elif _is_number(maximum):
        modifiers += f".lt({maximum})" if exclusive_maximum is True else f".lte({maximum})"
    return modifiers


def _array_modifiers(schema: Mapping[str, Any]) -> str:
    modifiers = ""
    if _is_number(schema.get("minItems")):
        modifiers += f".min({schema['minItems']})"
    if _is_number(schema.get("maxItems")):
        modifiers += f".max({schema['maxItems']})"
    return modifiers


def _common_modifiers(schema: Mapping[str, Any]) -> str:
    modifiers = ""
    if schema.get("nullable") is True:
        modifiers += ".nullable()"
    if isinstance(schema.get("description"), str):
        modifiers += f".describe({_literal(schema['description'])})"
    if "default" in schema:
        modifiers += f".default({_literal(schema['default'])})"
    return modifiers


def _property_key(key: str) -> str:
    return key if _JS_IDENTIFIER_RE.match(key) else _literal(key)


def _literal(value: JSONValue) -> str:
    return json.dumps(value)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
