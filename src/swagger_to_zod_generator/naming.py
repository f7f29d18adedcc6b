"""Naming helpers for generated schema identifiers."""

from __future__ import annotations

from collections.abc import Iterable
import re

SCHEMA_SUFFIX = "Schema"
ENUM_SCHEMA_SUFFIX = "EnumSchema"
FALLBACK_SCHEMA_NAME = "subSchema"

_MAX_COMBINED_STEMS = 3
_IDENTIFIER_SPLIT_RE = re.compile(r"[^0-9a-zA-Z_$]+")
_TRAILING_S_RE = re.compile(r"s$")


def to_lower_camel_case(raw: str) -> str:
    """Convert a property name into a lower-camel-case identifier stem.

    Args:
        raw (str): Property name as it appears in the schema.

    Returns:
        str: Identifier-safe stem, e.g. ``"billing-address"`` -> ``"billingAddress"``.
    """
    parts = [part for part in _IDENTIFIER_SPLIT_RE.split(raw) if part]
    if not parts:
        return "item"
    text = parts[0] + "".join(capitalize(part) for part in parts[1:])
    text = text[0].lower() + text[1:]
    if text[0].isdigit():
        text = f"_{text}"
    return text


def singular_stem(raw: str) -> str:
    """Strip one trailing ``s`` from a property name and camel-case it."""
    return to_lower_camel_case(_TRAILING_S_RE.sub("", raw) or raw)


def capitalize(text: str) -> str:
    """Upper-case the first character and keep the rest as-is."""
    if not text:
        return text
    return text[0].upper() + text[1:]


def generate_name_from_candidates(candidates: Iterable[str]) -> str:
    """Synthesize one identifier from every name a shared schema was seen under.

    Args:
        candidates (Iterable[str]): Candidate names in encounter order.

    Returns:
        str: A single candidate as-is, or up to three stems joined with ``And``.
    """
    names = list(dict.fromkeys(candidates))
    if not names:
        return FALLBACK_SCHEMA_NAME
    if len(names) == 1:
        return names[0]

    has_schema_suffix = all(name.endswith(SCHEMA_SUFFIX) for name in names)
    bases = [name.removesuffix(SCHEMA_SUFFIX) if has_schema_suffix else name for name in names]

    first_spelling: dict[str, str] = {}
    for base in bases:
        first_spelling.setdefault(base.lower(), base)
    stems = list(first_spelling.values())[:_MAX_COMBINED_STEMS]

    combined = "And".join(capitalize(stem) for stem in stems)
    combined = combined[:1].lower() + combined[1:]
    return f"{combined}{SCHEMA_SUFFIX}" if has_schema_suffix else combined
