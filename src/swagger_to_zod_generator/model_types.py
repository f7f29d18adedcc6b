"""Internal datatypes for schema extraction and conversion."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .hints import OptionalFieldHint
from .json_types import MutableJSONObject

DEFAULT_MAIN_NAME = "responseSchema"
DEFAULT_MAX_DEPTH = 10


@dataclass
class ExtractedSchema:
    """One deduplicated sub-schema and every name it was referenced under."""

    schema: MutableJSONObject
    candidate_names: list[str] = field(default_factory=list)
    final_name: Optional[str] = None

    def add_candidate(self, name: str) -> None:
        """Record a candidate name, keeping first-seen order."""
        if name not in self.candidate_names:
            self.candidate_names.append(name)


@dataclass(frozen=True)
class ConversionOptions:
    """Options for one schema-to-Zod conversion."""

    main_name: str = DEFAULT_MAIN_NAME
    max_depth: int = DEFAULT_MAX_DEPTH
    parser: str = "typescript"
    format_output: bool = True


@dataclass(frozen=True)
class ElementSource:
    """What the host page knows about one element showing a schema or example.

    ``method`` and ``path`` locate the operation in an OpenAPI document;
    ``texts`` are candidate text contents, most specific first.
    """

    method: Optional[str] = None
    path: Optional[str] = None
    response_code: str = "200"
    in_response_context: bool = False
    texts: tuple[str, ...] = ()
    is_optional: Optional[OptionalFieldHint] = None
