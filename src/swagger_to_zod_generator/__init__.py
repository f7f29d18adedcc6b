"""Generate deduplicated Zod schemas from JSON examples and OpenAPI documents."""

from __future__ import annotations

from .cli import main
from .converter import (
    convert_element,
    convert_json_text,
    convert_schema,
    extract_schema_for_element,
)
from .model_types import ConversionOptions, ElementSource

__all__ = [
    "ConversionOptions",
    "ElementSource",
    "convert_element",
    "convert_json_text",
    "convert_schema",
    "extract_schema_for_element",
    "main",
]
