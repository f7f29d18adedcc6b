"""Check inferred schemas against the example values they came from."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from jsonschema.exceptions import SchemaError
from jsonschema.validators import validator_for

from .json_types import JSONValue


@dataclass(frozen=True)
class VerificationIssue:
    """One validation failure of the example against its schema."""

    path: str
    message: str


@dataclass(frozen=True)
class VerificationReport:
    """Result of the verification phase."""

    schema_error: Optional[str]
    issues: tuple[VerificationIssue, ...]

    @property
    def ok(self) -> bool:
        """Whether the schema is valid and accepts the example."""
        return self.schema_error is None and not self.issues


def verify_inferred_schema(value: JSONValue, schema: dict[str, Any]) -> VerificationReport:
    """Validate ``value`` against ``schema`` with the matching JSON Schema validator.

    Args:
        value (JSONValue): Example value the schema was inferred from.
        schema (dict[str, Any]): Inferred schema, before sub-schema extraction.

    Returns:
        VerificationReport: Schema error, if any, and every validation issue.
    """
    validator_class = validator_for(schema)
    try:
        validator_class.check_schema(schema)
    except SchemaError as exc:
        return VerificationReport(schema_error=exc.message, issues=())

    validator = validator_class(schema)
    issues = tuple(
        VerificationIssue(path=error.json_path, message=error.message)
        for error in sorted(validator.iter_errors(value), key=lambda error: error.json_path)
    )
    return VerificationReport(schema_error=None, issues=issues)


def format_report(report: VerificationReport) -> str:
    """Render report as CLI output text."""
    if report.schema_error is not None:
        return f"Invalid schema: {short_repr(report.schema_error)}"
    lines = [f"Verification issues: {len(report.issues)}"]
    for issue in report.issues:
        lines.append(f"- {issue.path}: {short_repr(issue.message)}")
    return "\n".join(lines)


def short_repr(value: Any, *, limit: int = 160) -> str:
    """A short representation for diagnostics."""
    text = value if isinstance(value, str) else repr(value)
    return text if len(text) <= limit else f"{text[: limit - 3]}..."
