"""High-level conversion from JSON examples and schemas to Zod source."""

from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import Any, Optional

from .codegen import emit_module
from .extraction import extract_and_name
from .extractor import parse_json_candidate
from .formatting import FormatError, PrettierFormatter, SourceFormatter
from .hints import OptionalFieldHint, apply_presentation_hints
from .inference import infer_schema
from .json_types import MutableJSONObject
from .loader import is_openapi_document
from .model_types import ConversionOptions, ElementSource
from .resolver import find_schema_for_operation

logger = logging.getLogger(__name__)

_DEFAULT_OPTIONS = ConversionOptions()


async def convert_schema(
    schema: Any,
    *,
    options: ConversionOptions = _DEFAULT_OPTIONS,
    formatter: Optional[SourceFormatter] = None,
) -> Optional[str]:
    """Convert a schema node into formatted Zod declarations.

    Each call builds its own extraction table, so concurrent conversions
    never share state.

    Args:
        schema (Any): Schema node, inferred or taken from an OpenAPI document.
        options (ConversionOptions): Naming, depth and formatting options.
        formatter (Optional[SourceFormatter]): Formatter; prettier when omitted.

    Returns:
        Optional[str]: Zod source, or ``None`` when ``schema`` is not a schema node
            or is nested too deeply to render.
    """
    if not isinstance(schema, dict):
        return None

    try:
        processed, table = extract_and_name(schema, max_depth=options.max_depth)
        source = emit_module(table, processed, options.main_name)
    except RecursionError:
        logger.warning("Schema is nested too deeply to render")
        return None
    if not options.format_output:
        return source

    active_formatter = formatter if formatter is not None else PrettierFormatter()
    try:
        return await active_formatter.format(source, parser=options.parser)
    except FormatError as exc:
        logger.warning("Formatting failed, returning unformatted source: %s", exc)
        return source


async def convert_json_text(
    text: str,
    *,
    options: ConversionOptions = _DEFAULT_OPTIONS,
    formatter: Optional[SourceFormatter] = None,
    is_optional: Optional[OptionalFieldHint] = None,
) -> Optional[str]:
    """Infer a schema from JSON embedded in ``text`` and convert it.

    Args:
        text (str): Text holding a JSON example, possibly surrounded by prose.
        options (ConversionOptions): Conversion options.
        formatter (Optional[SourceFormatter]): Formatter; prettier when omitted.
        is_optional (Optional[OptionalFieldHint]): Optionality hints from the view.

    Returns:
        Optional[str]: Zod source, or ``None`` when the text holds no JSON.
    """
    schema = schema_from_text(text, is_optional=is_optional)
    if schema is None:
        return None
    return await convert_schema(schema, options=options, formatter=formatter)


def schema_from_text(
    text: str,
    *,
    is_optional: Optional[OptionalFieldHint] = None,
) -> Optional[MutableJSONObject]:
    """Parse JSON from ``text`` and infer its schema, merging hints when given."""
    value = parse_json_candidate(text)
    if value is None:
        return None
    try:
        schema = infer_schema(value)
        if is_optional is not None:
            schema = apply_presentation_hints(schema, is_optional)
    except RecursionError:
        logger.debug("Example value is nested too deeply to infer")
        return None
    return schema


def extract_schema_for_element(
    source: ElementSource,
    document: Optional[Mapping[str, Any]] = None,
) -> Optional[MutableJSONObject]:
    """Find the schema describing one page element.

    The OpenAPI document is consulted first when it declares a version or
    paths and the element's operation is known; otherwise the first
    candidate text holding JSON is inferred.

    Args:
        source (ElementSource): Element data gathered by the host.
        document (Optional[Mapping[str, Any]]): Loaded OpenAPI document, if any.

    Returns:
        Optional[MutableJSONObject]: Schema node, or ``None`` when nothing was found.
    """
    if (
        document is not None
        and source.method
        and source.path
        and is_openapi_document(document)
    ):
        schema = find_schema_for_operation(
            document,
            source.method,
            source.path,
            response_code=source.response_code,
            in_response_context=source.in_response_context,
        )
        if schema is not None:
            return schema

    for text in source.texts:
        schema = schema_from_text(text, is_optional=source.is_optional)
        if schema is not None:
            return schema
    return None


async def convert_element(
    source: ElementSource,
    *,
    document: Optional[Mapping[str, Any]] = None,
    options: ConversionOptions = _DEFAULT_OPTIONS,
    formatter: Optional[SourceFormatter] = None,
) -> Optional[str]:
    """Produce Zod source for one page element, or ``None`` to skip it."""
    schema = extract_schema_for_element(source, document)
    if schema is None:
        logger.debug("No schema found for element %s %s", source.method, source.path)
        return None
    return await convert_schema(schema, options=options, formatter=formatter)
