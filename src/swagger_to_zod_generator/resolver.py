"""Reference resolution and operation schema lookup in OpenAPI documents."""

from __future__ import annotations

from collections.abc import Mapping
from copy import deepcopy
import logging
import re
from typing import Any, Optional

logger = logging.getLogger(__name__)

COMMON_PATH_PREFIXES: tuple[str, ...] = ("/api", "/v1", "/v2", "/api/v1", "/api/v2")

_LOCAL_REF_PREFIX = "#/"
_DEFAULT_RESPONSE = "default"
_DEFAULT_RESPONSE_CODE = "200"
_STATUS_CODE_RE = re.compile(r"\b(1\d{2}|2\d{2}|3\d{2}|4\d{2}|5\d{2}|default)\b", re.IGNORECASE)


class RefResolver:
    """Inline local ``$ref`` pointers for one top-level resolution call.

    Every pointer expanded during the call is remembered. Meeting the same
    pointer again returns the ``$ref`` node unexpanded, which keeps cyclic
    documents finite.
    """

    def __init__(self, document: Mapping[str, Any]) -> None:
        self._document = document
        self._visited: set[str] = set()

    def resolve(self, node: Any) -> Any:
        """Return a deep copy of ``node`` with local references inlined."""
        return self._resolve(deepcopy(node))

    def _resolve(self, node: Any) -> Any:
        if isinstance(node, list):
            return [self._resolve(item) for item in node]
        if not isinstance(node, dict):
            return node

        ref_value = node.get("$ref")
        if isinstance(ref_value, str):
            if ref_value in self._visited:
                return node
            self._visited.add(ref_value)
            target = resolve_ref_path(ref_value, self._document)
            if target is not None:
                return self._resolve(deepcopy(target))
            logger.debug("Leaving unresolved reference %s in place", ref_value)

        for key, value in node.items():
            node[key] = self._resolve(value)
        return node


def resolve_refs(node: Any, document: Mapping[str, Any]) -> Any:
    """Inline local references in ``node`` against ``document``.

    Args:
        node (Any): Schema fragment that may contain ``$ref`` nodes.
        document (Mapping[str, Any]): OpenAPI document used as pointer root.

    Returns:
        Any: Resolved copy of ``node``; the input is left untouched.
    """
    return RefResolver(document).resolve(node)


def resolve_ref_path(pointer: str, document: Mapping[str, Any]) -> Optional[dict[str, Any]]:
    """Walk a ``#/``-rooted JSON pointer and return the mapping it names.

    Args:
        pointer (str): JSON pointer such as ``#/components/schemas/User``.
        document (Mapping[str, Any]): Document to walk.

    Returns:
        Optional[dict[str, Any]]: Target mapping, or ``None`` when unsupported or missing.
    """
    if not pointer.startswith(_LOCAL_REF_PREFIX):
        return None

    current: Any = document
    for raw_token in pointer[len(_LOCAL_REF_PREFIX) :].split("/"):
        token = raw_token.replace("~1", "/").replace("~0", "~")
        if isinstance(current, Mapping):
            if token not in current:
                return None
            current = current[token]
        elif isinstance(current, list) and token.isdigit() and int(token) < len(current):
            current = current[int(token)]
        else:
            return None

    return current if isinstance(current, dict) else None


def resolve_object_ref(node: Any, document: Mapping[str, Any]) -> Optional[dict[str, Any]]:
    """Follow a single level of ``$ref`` indirection on an OpenAPI object."""
    if not isinstance(node, dict):
        return None
    ref_value = node.get("$ref")
    if not isinstance(ref_value, str):
        return node
    return resolve_ref_path(ref_value, document) or node


def find_operation(
    paths: Mapping[str, Any],
    method: str,
    path: str,
) -> Optional[dict[str, Any]]:
    """Locate an operation, tolerating trailing slashes and common API prefixes.

    Args:
        paths (Mapping[str, Any]): The document's ``paths`` object.
        method (str): HTTP method, any case.
        path (str): Path template as displayed for the operation.

    Returns:
        Optional[dict[str, Any]]: Operation object, or ``None`` when not found.
    """
    method_key = method.strip().lower()

    operation = _operation_at(paths, path, method_key)
    if operation is not None:
        return operation

    toggled = path[:-1] if path.endswith("/") else f"{path}/"
    operation = _operation_at(paths, toggled, method_key)
    if operation is not None:
        return operation

    for prefix in COMMON_PATH_PREFIXES:
        if not path.startswith(prefix):
            continue
        stripped = path[len(prefix) :]
        operation = _operation_at(paths, stripped, method_key)
        if operation is None:
            operation = _operation_at(paths, f"{prefix}{stripped}", method_key)
        if operation is not None:
            return operation

    logger.debug("No operation found for %s %s", method_key.upper(), path)
    return None


def find_response_schema(
    operation: Mapping[str, Any],
    response_code: str,
    document: Mapping[str, Any],
) -> Optional[dict[str, Any]]:
    """Return the resolved response schema for one status code.

    Args:
        operation (Mapping[str, Any]): Operation object.
        response_code (str): Status code or ``default``.
        document (Mapping[str, Any]): Document used to resolve references.

    Returns:
        Optional[dict[str, Any]]: Resolved schema, or ``None`` when absent.
    """
    responses = operation.get("responses")
    if not isinstance(responses, Mapping):
        return None

    response = _select_response(responses, response_code)
    response = resolve_object_ref(response, document)
    if response is None:
        return None

    content = response.get("content")
    if isinstance(content, Mapping):
        media = _select_media(content)
        if media is not None and isinstance(media.get("schema"), dict):
            return _resolved_schema(media["schema"], document)

    legacy_schema = response.get("schema")
    if isinstance(legacy_schema, dict):
        return _resolved_schema(legacy_schema, document)
    return None


def find_request_body_schema(
    operation: Mapping[str, Any],
    document: Mapping[str, Any],
) -> Optional[dict[str, Any]]:
    """Return the resolved request body schema of an operation.

    OpenAPI 3 ``requestBody`` content is preferred; Swagger 2 ``in: body``
    parameters are used otherwise.

    Args:
        operation (Mapping[str, Any]): Operation object.
        document (Mapping[str, Any]): Document used to resolve references.

    Returns:
        Optional[dict[str, Any]]: Resolved schema, or ``None`` when absent.
    """
    request_body = resolve_object_ref(operation.get("requestBody"), document)
    if request_body is not None:
        content = request_body.get("content")
        if isinstance(content, Mapping):
            media = _select_json_media(content) or _select_media(content)
            if media is not None and isinstance(media.get("schema"), dict):
                return _resolved_schema(media["schema"], document)

    parameters = operation.get("parameters")
    if not isinstance(parameters, list):
        return None
    for parameter in parameters:
        resolved_parameter = resolve_object_ref(parameter, document)
        if resolved_parameter is None:
            continue
        schema = resolved_parameter.get("schema")
        if resolved_parameter.get("in") == "body" and isinstance(schema, dict):
            return _resolved_schema(schema, document)
    return None


def find_schema_for_operation(
    document: Mapping[str, Any],
    method: str,
    path: str,
    *,
    response_code: str = _DEFAULT_RESPONSE_CODE,
    in_response_context: bool = False,
) -> Optional[dict[str, Any]]:
    """Look up the schema shown next to an operation.

    Inside a response section the response schema wins; elsewhere the
    request body is tried first and the response schema is the fallback.

    Args:
        document (Mapping[str, Any]): Loaded OpenAPI document.
        method (str): HTTP method of the operation.
        path (str): Displayed operation path.
        response_code (str): Status code used for response lookups.
        in_response_context (bool): Whether the element sits in a response section.

    Returns:
        Optional[dict[str, Any]]: Resolved schema, or ``None`` when nothing matches.
    """
    paths = document.get("paths")
    if not isinstance(paths, Mapping):
        return None
    operation = find_operation(paths, method, path)
    if operation is None:
        return None

    if in_response_context:
        return find_response_schema(operation, response_code, document)

    request_schema = find_request_body_schema(operation, document)
    if request_schema is not None:
        return request_schema
    return find_response_schema(operation, response_code, document)


def resolve_response_code(explicit: Optional[str], *texts: Optional[str]) -> str:
    """Pick the response status code to look up.

    Args:
        explicit (Optional[str]): Code given directly, e.g. from a ``data-code`` attribute.
        *texts (Optional[str]): Free texts that may mention a status code.

    Returns:
        str: Explicit code, first code found in ``texts``, or ``"200"``.
    """
    if explicit is not None and explicit.strip():
        return explicit.strip()
    for text in texts:
        if not text:
            continue
        match = _STATUS_CODE_RE.search(text)
        if match:
            return match.group(0).lower()
    return _DEFAULT_RESPONSE_CODE


def _operation_at(paths: Mapping[str, Any], path: str, method: str) -> Optional[dict[str, Any]]:
    path_item = paths.get(path)
    if not isinstance(path_item, Mapping):
        return None
    operation = path_item.get(method)
    return operation if isinstance(operation, dict) else None


def _select_response(responses: Mapping[str, Any], response_code: str) -> Any:
    response = responses.get(response_code)
    if response is not None:
        return response

    normalized = response_code.lower()
    for code, candidate in responses.items():
        if str(code).lower() == normalized:
            return candidate

    if normalized != _DEFAULT_RESPONSE:
        return responses.get(_DEFAULT_RESPONSE)
    return None


def _select_media(content: Mapping[str, Any]) -> Optional[dict[str, Any]]:
    for media_type in ("application/json", "*/*"):
        media = content.get(media_type)
        if media is not None:
            return media if isinstance(media, dict) else None
    first_media = next(iter(content.values()), None)
    return first_media if isinstance(first_media, dict) else None


def _select_json_media(content: Mapping[str, Any]) -> Optional[dict[str, Any]]:
    for media_type, media in content.items():
        if "json" in str(media_type).lower() and isinstance(media, dict):
            return media
    return None


def _resolved_schema(
    schema: dict[str, Any],
    document: Mapping[str, Any],
) -> Optional[dict[str, Any]]:
    resolved = resolve_refs(schema, document)
    return resolved if isinstance(resolved, dict) else None
