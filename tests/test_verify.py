"""Unit tests for inferred schema verification."""

from __future__ import annotations

from swagger_to_zod_generator.inference import infer_schema
from swagger_to_zod_generator.verify import format_report, verify_inferred_schema


def test_inferred_schema_accepts_its_example() -> None:
    """An inferred schema always validates the value it came from."""
    value = {"id": 1, "price": 2.5, "tags": [{"label": "x"}], "note": None}

    report = verify_inferred_schema(value, infer_schema(value))

    assert report.ok
    assert format_report(report) == "Verification issues: 0"


def test_mismatching_value_reports_issues() -> None:
    """Values that break the schema are listed with their JSON paths."""
    schema = infer_schema({"id": 1, "name": "a"})

    report = verify_inferred_schema({"id": "one"}, schema)

    assert not report.ok
    assert {issue.path for issue in report.issues} == {"$", "$.id"}
    assert format_report(report).startswith("Verification issues: 2")


def test_invalid_schema_is_reported() -> None:
    """Schemas rejected by the metaschema produce a schema error."""
    report = verify_inferred_schema({}, {"type": 5})

    assert not report.ok
    assert report.schema_error is not None
    assert format_report(report).startswith("Invalid schema:")
