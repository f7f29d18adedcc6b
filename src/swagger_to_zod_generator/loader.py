"""OpenAPI document and example text loading."""

from __future__ import annotations

from pathlib import Path
import sys
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator
import yaml

from .json_types import JSONObject, JSONValue

_STDIN_PATH = "-"


class OpenAPILoadError(RuntimeError):
    """Raised when a source OpenAPI document cannot be loaded."""


class InputLoadError(RuntimeError):
    """Raised when example input text cannot be read."""


class _OpenAPIDocumentShape(BaseModel):
    """Loose shape check accepting both OpenAPI 3 and Swagger 2 documents."""

    model_config = ConfigDict(extra="allow")

    openapi: Optional[Union[str, float]] = None
    swagger: Optional[Union[str, float]] = None
    paths: Optional[dict[str, Any]] = None

    @model_validator(mode="after")
    def require_marker(self) -> _OpenAPIDocumentShape:
        if self.openapi is None and self.swagger is None and self.paths is None:
            raise ValueError("document declares none of 'paths', 'openapi' or 'swagger'")
        return self


def is_openapi_document(payload: JSONValue) -> bool:
    """Return whether a parsed payload looks like an OpenAPI document."""
    if not isinstance(payload, dict):
        return False
    try:
        _OpenAPIDocumentShape.model_validate(payload)
    except ValidationError:
        return False
    return True


def load_openapi_document(path: Path) -> JSONObject:
    """Load an OpenAPI or Swagger document from YAML or JSON.

    Args:
        path (Path): Document location.

    Returns:
        JSONObject: Parsed document mapping.
    """
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle)
    except OSError as exc:
        raise OpenAPILoadError(f"Failed to read OpenAPI file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise OpenAPILoadError(f"Failed to parse {path}: {exc}") from exc

    payload_value: JSONValue = payload
    if not isinstance(payload_value, dict):
        raise OpenAPILoadError(
            f"OpenAPI document must deserialize to a mapping, got {type(payload_value)!r}"
        )

    try:
        _OpenAPIDocumentShape.model_validate(payload_value)
    except ValidationError as exc:
        raise OpenAPILoadError(f"OpenAPI document validation failed for {path}: {exc}") from exc

    return payload_value


def get_openapi_version(document: JSONObject) -> Optional[str]:
    """Return the declared ``openapi`` or ``swagger`` version string."""
    for key in ("openapi", "swagger"):
        version = document.get(key)
        if isinstance(version, (int, float)) and not isinstance(version, bool):
            return str(version)
        if isinstance(version, str) and version.strip():
            return version.strip()
    return None


def read_input_text(path: str) -> str:
    """Read example text from a file, or from stdin when ``path`` is ``-``."""
    if path == _STDIN_PATH:
        return sys.stdin.read()
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise InputLoadError(f"Failed to read input file {path}: {exc}") from exc
