"""Command line interface for JSON and OpenAPI to Zod conversion."""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
import sys
from typing import Any, Optional

from .converter import convert_schema
from .extractor import parse_json_candidate
from .formatting import PrettierFormatter
from .hints import apply_presentation_hints, optional_fields_hint
from .inference import infer_schema
from .loader import (
    InputLoadError,
    OpenAPILoadError,
    get_openapi_version,
    load_openapi_document,
    read_input_text,
)
from .model_types import DEFAULT_MAIN_NAME, DEFAULT_MAX_DEPTH, ConversionOptions
from .resolver import (
    find_operation,
    find_request_body_schema,
    find_response_schema,
    resolve_response_code,
)
from .verify import format_report, verify_inferred_schema

logger = logging.getLogger(__name__)


class WriteError(RuntimeError):
    """Raised when output files cannot be written."""


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser."""
    parser = argparse.ArgumentParser(
        prog="swagger-to-zod-generator",
        description="Generate deduplicated Zod schemas from JSON examples or OpenAPI operations",
    )
    parser.add_argument("--input", help="File with a JSON example, '-' for stdin")
    parser.add_argument("--openapi", help="Path to an OpenAPI or Swagger document (YAML or JSON)")
    parser.add_argument("--method", help="HTTP method of the operation to convert")
    parser.add_argument("--path", help="Path of the operation to convert")
    parser.add_argument("--status", help="Response status code (default: 200)")
    parser.add_argument(
        "--request-body",
        action="store_true",
        help="Convert the request body schema instead of a response schema",
    )
    parser.add_argument("--name", default=DEFAULT_MAIN_NAME, help="Name of the root schema")
    parser.add_argument(
        "--max-depth",
        type=int,
        default=DEFAULT_MAX_DEPTH,
        help="Nesting depth beyond which sub-schemas stay inline",
    )
    parser.add_argument(
        "--optional-field",
        action="append",
        default=[],
        help="Field name or dotted path to treat as optional (repeatable)",
    )
    parser.add_argument("--no-format", action="store_true", help="Skip prettier formatting")
    parser.add_argument("--prettier", default="prettier", help="Prettier executable")
    parser.add_argument(
        "--verify",
        action="store_true",
        help="Validate the JSON example against the inferred schema",
    )
    parser.add_argument("--output", help="Write generated source to this file instead of stdout")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Run CLI and return process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        schema, example = _load_schema(args, parser)
    except (OpenAPILoadError, InputLoadError) as exc:
        parser.error(str(exc))
        return 2

    if schema is None:
        print("No schema could be produced from the given input.", file=sys.stderr)
        return 1

    if args.verify and example is not None:
        report = verify_inferred_schema(example, schema)
        print(format_report(report), file=sys.stderr)
        if not report.ok:
            return 1

    options = ConversionOptions(
        main_name=args.name,
        max_depth=args.max_depth,
        format_output=not args.no_format,
    )
    source = asyncio.run(
        convert_schema(
            schema,
            options=options,
            formatter=PrettierFormatter(executable=args.prettier),
        )
    )
    if source is None:
        print("No schema could be produced from the given input.", file=sys.stderr)
        return 1

    try:
        _write_output(source, args.output)
    except WriteError as exc:
        parser.error(str(exc))
        return 2
    return 0


def _load_schema(
    args: argparse.Namespace,
    parser: argparse.ArgumentParser,
) -> tuple[Optional[dict[str, Any]], Any]:
    if args.openapi:
        if not args.method or not args.path:
            parser.error("--openapi requires --method and --path")
        document = load_openapi_document(Path(args.openapi))
        logger.debug("Loaded OpenAPI document version %s", get_openapi_version(document))
        return _schema_from_document(document, args), None

    if not args.input:
        parser.error("one of --input or --openapi is required")

    example = parse_json_candidate(read_input_text(args.input))
    if example is None:
        return None, None
    schema = infer_schema(example)
    if args.optional_field:
        schema = apply_presentation_hints(schema, optional_fields_hint(args.optional_field))
    return schema, example


def _schema_from_document(
    document: dict[str, Any],
    args: argparse.Namespace,
) -> Optional[dict[str, Any]]:
    paths = document.get("paths")
    if not isinstance(paths, dict):
        return None
    operation = find_operation(paths, args.method, args.path)
    if operation is None:
        return None
    if args.request_body:
        return find_request_body_schema(operation, document)
    return find_response_schema(operation, resolve_response_code(args.status), document)


def _write_output(source: str, output: Optional[str]) -> None:
    if output is None:
        sys.stdout.write(source)
        return
    try:
        Path(output).write_text(source, encoding="utf-8")
    except OSError as exc:
        raise WriteError(f"Failed to write file {output}: {exc}") from exc


if __name__ == "__main__":
    raise SystemExit(main())
