"""Unit tests for OpenAPI reference resolution and operation lookup."""

from __future__ import annotations

from copy import deepcopy
import json
from typing import Any, Optional

import pytest

from swagger_to_zod_generator.resolver import (
    find_operation,
    find_request_body_schema,
    find_response_schema,
    find_schema_for_operation,
    resolve_ref_path,
    resolve_refs,
    resolve_response_code,
)

from .fixture_helpers import load_fixture

_CYCLIC_DOCUMENT: dict[str, Any] = {
    "components": {
        "schemas": {
            "A": {"type": "object", "properties": {"b": {"$ref": "#/components/schemas/B"}}},
            "B": {"type": "object", "properties": {"a": {"$ref": "#/components/schemas/A"}}},
        }
    }
}


@pytest.fixture(name="petstore")
def _petstore() -> dict[str, Any]:
    return load_fixture("petstore.yaml")


@pytest.fixture(name="swagger2")
def _swagger2() -> dict[str, Any]:
    return load_fixture("swagger2.json")


def test_resolve_refs_inlines_targets_without_mutating_inputs(petstore: dict[str, Any]) -> None:
    """Resolution returns a copy and leaves the node and document untouched."""
    node = {"type": "array", "items": {"$ref": "#/components/schemas/Pet"}}
    node_before = deepcopy(node)
    document_before = deepcopy(petstore)

    resolved = resolve_refs(node, petstore)

    assert resolved["items"] == petstore["components"]["schemas"]["Pet"]
    assert resolved["items"] is not petstore["components"]["schemas"]["Pet"]
    assert node == node_before
    assert petstore == document_before


def test_pointer_cycle_terminates_with_one_unresolved_marker() -> None:
    """``A -> B -> A`` stops at the second visit of ``A``."""
    resolved = resolve_refs({"$ref": "#/components/schemas/A"}, _CYCLIC_DOCUMENT)

    inner = resolved["properties"]["b"]["properties"]["a"]
    assert inner == {"$ref": "#/components/schemas/A"}
    assert json.dumps(resolved).count('"$ref"') == 1


def test_repeated_pointer_in_one_call_is_left_unexpanded(petstore: dict[str, Any]) -> None:
    """The visited set spans the whole call, not just the current branch."""
    node = {
        "type": "object",
        "properties": {
            "home": {"$ref": "#/components/schemas/Address"},
            "work": {"$ref": "#/components/schemas/Address"},
        },
    }

    resolved = resolve_refs(node, petstore)

    assert resolved["properties"]["home"]["type"] == "object"
    assert resolved["properties"]["work"] == {"$ref": "#/components/schemas/Address"}


def test_unsupported_and_missing_pointers_stay_in_place(petstore: dict[str, Any]) -> None:
    """Bad pointers do not stop the rest of the tree from resolving."""
    node = {
        "type": "object",
        "properties": {
            "remote": {"$ref": "other.yaml#/components/schemas/Pet"},
            "missing": {"$ref": "#/components/schemas/Nope"},
            "pet": {"$ref": "#/components/schemas/Pet"},
        },
    }

    resolved = resolve_refs(node, petstore)

    assert resolved["properties"]["remote"] == {"$ref": "other.yaml#/components/schemas/Pet"}
    assert resolved["properties"]["missing"] == {"$ref": "#/components/schemas/Nope"}
    assert resolved["properties"]["pet"]["required"] == ["id", "name"]


def test_resolve_ref_path_unescapes_tokens_and_walks_lists(petstore: dict[str, Any]) -> None:
    """JSON pointer escapes and array indices are honoured."""
    operation = resolve_ref_path("#/paths/~1users~1{id}/get", petstore)
    assert operation is not None
    assert operation["summary"] == "Fetch one user."

    assert resolve_ref_path("#/items/1", {"items": [{"a": 1}, {"b": 2}]}) == {"b": 2}
    assert resolve_ref_path("#/items/5", {"items": [{"a": 1}]}) is None
    assert resolve_ref_path("/components/schemas/Pet", petstore) is None


def test_find_operation_exact_and_trailing_slash(petstore: dict[str, Any]) -> None:
    """Exact paths match first; a toggled trailing slash is the first fallback."""
    paths = petstore["paths"]

    assert find_operation(paths, "GET", "/pets") is paths["/pets"]["get"]
    assert find_operation(paths, "get", "/pets/") is paths["/pets"]["get"]
    assert find_operation(paths, "get", "/reports") is paths["/reports/"]["get"]
    assert find_operation(paths, "delete", "/pets") is None


def test_find_operation_strips_common_prefixes(petstore: dict[str, Any]) -> None:
    """A displayed ``/api`` prefix resolves to the unprefixed document path."""
    paths = petstore["paths"]
    exact = find_operation(paths, "get", "/users/{id}")

    assert exact is not None
    assert find_operation(paths, "get", "/api/users/{id}") is exact
    assert find_operation(paths, "get", "/api/v1/users/{id}") is exact
    assert find_operation(paths, "get", "/internal/users/{id}") is None


def test_response_schema_status_fallbacks(petstore: dict[str, Any]) -> None:
    """Exact code first, then case-insensitive code, then ``default``."""
    operation = petstore["paths"]["/pets"]["get"]

    ok_schema = find_response_schema(operation, "200", petstore)
    assert ok_schema is not None
    assert ok_schema["type"] == "array"
    assert ok_schema["items"]["required"] == ["id", "name"]

    error_schema = find_response_schema(operation, "404", petstore)
    assert error_schema == petstore["components"]["schemas"]["Error"]

    assert find_response_schema(operation, "DEFAULT", petstore) == error_schema


def test_response_schema_content_fallbacks(
    petstore: dict[str, Any],
    swagger2: dict[str, Any],
) -> None:
    """``*/*``, the first media type and the legacy ``schema`` field are all honoured."""
    user_operation = petstore["paths"]["/users/{id}"]["get"]
    user_schema = find_response_schema(user_operation, "200", petstore)
    assert user_schema is not None
    assert user_schema["properties"]["id"] == {"type": "string", "format": "uuid"}

    report_operation = petstore["paths"]["/reports/"]["get"]
    assert find_response_schema(report_operation, "200", petstore) == {"type": "string"}

    order_operation = swagger2["paths"]["/v1/orders/"]["post"]
    order_schema = find_response_schema(order_operation, "200", swagger2)
    assert order_schema is not None
    assert order_schema["properties"]["lines"]["items"]["properties"]["sku"] == {"type": "string"}


def test_response_schema_follows_response_refs(petstore: dict[str, Any]) -> None:
    """Responses declared under ``components/responses`` are followed."""
    operation = petstore["paths"]["/pets"]["post"]

    assert find_response_schema(operation, "201", petstore) == {
        "type": "object",
        "properties": {"id": {"type": "integer"}},
    }
    assert find_response_schema(operation, "500", petstore) is None


def test_request_body_prefers_json_like_media_type(petstore: dict[str, Any]) -> None:
    """A vendor ``+json`` media type behind a ``$ref`` request body is found."""
    operation = petstore["paths"]["/pets"]["post"]

    schema = find_request_body_schema(operation, petstore)

    assert schema == petstore["components"]["schemas"]["Pet"]


def test_request_body_from_swagger2_body_parameter(swagger2: dict[str, Any]) -> None:
    """A ``$ref`` parameter with ``in: body`` supplies the request schema."""
    operation = swagger2["paths"]["/v1/orders/"]["post"]

    schema = find_request_body_schema(operation, swagger2)

    assert schema is not None
    assert schema["required"] == ["id"]

    operation_without_body = {"parameters": [{"in": "query", "name": "limit"}], "responses": {}}
    assert find_request_body_schema(operation_without_body, swagger2) is None


def test_find_schema_for_operation_orders_by_context(petstore: dict[str, Any]) -> None:
    """Response sections prefer responses; other sections prefer the request body."""
    request_schema = find_schema_for_operation(petstore, "post", "/pets")
    assert request_schema == petstore["components"]["schemas"]["Pet"]

    response_schema = find_schema_for_operation(
        petstore,
        "post",
        "/pets",
        response_code="201",
        in_response_context=True,
    )
    assert response_schema is not None
    assert response_schema["properties"] == {"id": {"type": "integer"}}

    fallback_schema = find_schema_for_operation(petstore, "get", "/api/pets")
    assert fallback_schema is not None
    assert fallback_schema["type"] == "array"

    assert find_schema_for_operation(petstore, "get", "/unknown") is None
    assert find_schema_for_operation({"openapi": "3.0.0"}, "get", "/pets") is None


@pytest.mark.parametrize(
    ("explicit", "texts", "expected"),
    [
        ("404", (), "404"),
        ("  ", ("Code 201 Created",), "201"),
        (None, (None, "DEFAULT response"), "default"),
        (None, ("no status here",), "200"),
        (None, (), "200"),
    ],
)
def test_resolve_response_code(
    explicit: Optional[str],
    texts: tuple[Optional[str], ...],
    expected: str,
) -> None:
    """The explicit code wins, then the first code mentioned, then ``200``."""
    assert resolve_response_code(explicit, *texts) == expected
