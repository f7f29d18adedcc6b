"""Extract repeated and nameable sub-schemas into a deduplicated table."""

from __future__ import annotations

from dataclasses import dataclass, field
import json

from .json_types import JSONValue, MutableJSONObject
from .model_types import DEFAULT_MAX_DEPTH, ExtractedSchema
from .naming import (
    ENUM_SCHEMA_SUFFIX,
    SCHEMA_SUFFIX,
    generate_name_from_candidates,
    singular_stem,
    to_lower_camel_case,
)
from .schema_utils import is_array_of_enums, is_array_of_objects, is_enum_schema, is_nested_object

REF_HASH_KEY = "x-zod-ref"
REF_ITEMS_HASH_KEY = "x-zod-ref-items"


def canonical_hash(schema: JSONValue) -> str:
    """Serialize a schema with sorted keys so equal shapes share one key.

    Args:
        schema (JSONValue): Schema node to serialize.

    Returns:
        str: Key-order independent serialization.
    """
    return json.dumps(schema, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


@dataclass
class ExtractionTable:
    """Deduplicated sub-schemas collected during one conversion."""

    entries: dict[str, ExtractedSchema] = field(default_factory=dict)

    def register(self, schema: MutableJSONObject, candidate_name: str) -> str:
        """Add one occurrence of ``schema`` and return its content hash."""
        schema_hash = canonical_hash(schema)
        entry = self.entries.get(schema_hash)
        if entry is None:
            entry = ExtractedSchema(schema=schema)
            self.entries[schema_hash] = entry
        entry.add_candidate(candidate_name)
        return schema_hash

    def assign_names(self) -> dict[str, str]:
        """Pick a final name for every entry and return the hash-to-name map."""
        names: dict[str, str] = {}
        for schema_hash, entry in self.entries.items():
            entry.final_name = generate_name_from_candidates(entry.candidate_names)
            names[schema_hash] = entry.final_name
        return names

    def names(self) -> dict[str, str]:
        """Return the hash-to-name map of already named entries."""
        return {
            schema_hash: entry.final_name
            for schema_hash, entry in self.entries.items()
            if entry.final_name is not None
        }


def extract_and_name(
    root: MutableJSONObject,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> tuple[MutableJSONObject, ExtractionTable]:
    """Replace nameable sub-schemas with reference markers and name them.

    Args:
        root (MutableJSONObject): Root schema node.
        max_depth (int): Nesting depth beyond which sub-schemas stay inline.

    Returns:
        tuple[MutableJSONObject, ExtractionTable]: Processed root and the named table.
    """
    table = ExtractionTable()
    processed = _extract(root, table, depth=0, max_depth=max_depth)
    table.assign_names()
    return processed, table


def _extract(
    schema: MutableJSONObject,
    table: ExtractionTable,
    *,
    depth: int,
    max_depth: int,
) -> MutableJSONObject:
    if depth > max_depth:
        return schema

    properties = schema.get("properties")
    if schema.get("type") == "object" and isinstance(properties, dict) and properties:
        new_properties: MutableJSONObject = {}
        for key, prop_schema in properties.items():
            new_properties[key] = _extract_property(
                key,
                prop_schema,
                table,
                depth=depth,
                max_depth=max_depth,
            )
        return {**schema, "properties": new_properties}

    items = schema.get("items")
    if schema.get("type") == "array" and isinstance(items, dict) and items:
        return {**schema, "items": _extract(items, table, depth=depth + 1, max_depth=max_depth)}

    return schema


def _extract_property(
    key: str,
    prop_schema: JSONValue,
    table: ExtractionTable,
    *,
    depth: int,
    max_depth: int,
) -> JSONValue:
    if not isinstance(prop_schema, dict):
        return prop_schema

    if is_nested_object(prop_schema):
        processed = _extract(prop_schema, table, depth=depth + 1, max_depth=max_depth)
        schema_hash = table.register(processed, f"{to_lower_camel_case(key)}{SCHEMA_SUFFIX}")
        return {REF_HASH_KEY: schema_hash}

    if is_array_of_objects(prop_schema):
        items = _extract(prop_schema["items"], table, depth=depth + 1, max_depth=max_depth)
        schema_hash = table.register(items, f"{singular_stem(key)}{SCHEMA_SUFFIX}")
        return _array_marker(prop_schema, schema_hash)

    if is_array_of_enums(prop_schema):
        schema_hash = table.register(
            prop_schema["items"],
            f"{singular_stem(key)}{ENUM_SCHEMA_SUFFIX}",
        )
        return _array_marker(prop_schema, schema_hash)

    if is_enum_schema(prop_schema):
        schema_hash = table.register(
            prop_schema,
            f"{to_lower_camel_case(key)}{ENUM_SCHEMA_SUFFIX}",
        )
        return {REF_HASH_KEY: schema_hash}

    return _extract(prop_schema, table, depth=depth + 1, max_depth=max_depth)


def _array_marker(array_schema: MutableJSONObject, schema_hash: str) -> MutableJSONObject:
    marker: MutableJSONObject = {
        name: value for name, value in array_schema.items() if name != "items"
    }
    marker[REF_ITEMS_HASH_KEY] = schema_hash
    return marker
