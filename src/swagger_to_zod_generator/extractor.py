"""Locate and parse JSON embedded in free text."""

from __future__ import annotations

from dataclasses import dataclass
import json
from typing import Optional

from .json_types import JSONValue

_BRACKET_PAIRS: dict[str, str] = {"{": "}", "[": "]"}


@dataclass
class BracketScanner:
    """Track bracket balance for one bracket kind, ignoring string contents.

    The scanner holds two pieces of state besides the balance: whether the
    cursor sits inside a string literal, and whether the previous character
    was a backslash that escapes the current one.
    """

    open_char: str
    close_char: str
    balance: int = 0
    in_string: bool = False
    escaped: bool = False

    def feed(self, char: str) -> bool:
        """Consume one character and report whether the outer bracket closed.

        Args:
            char (str): Next character of the scanned text.

        Returns:
            bool: ``True`` when the balance returns to zero on a closing bracket.
        """
        if self.escaped:
            self.escaped = False
            return False
        if char == "\\":
            self.escaped = True
            return False
        if char == '"':
            self.in_string = not self.in_string
            return False
        if self.in_string:
            return False
        if char == self.open_char:
            self.balance += 1
        elif char == self.close_char:
            self.balance -= 1
            return self.balance == 0
        return False


def extract_balanced_json(text: str) -> Optional[str]:
    """Return the first balanced JSON object or array embedded in ``text``.

    Args:
        text (str): Arbitrary text that may surround a JSON document.

    Returns:
        Optional[str]: The balanced span, or ``None`` when none exists.
    """
    start = _first_opening_index(text)
    if start is None:
        return None

    open_char = text[start]
    scanner = BracketScanner(open_char=open_char, close_char=_BRACKET_PAIRS[open_char])
    for index in range(start, len(text)):
        if scanner.feed(text[index]):
            return text[start : index + 1]
    return None


def parse_json_candidate(text: str) -> Optional[JSONValue]:
    """Parse JSON from element text, falling back to the balanced span.

    Args:
        text (str): Raw text content of a candidate element.

    Returns:
        Optional[JSONValue]: Parsed value, or ``None`` when no JSON is present.
            Numbers or nesting beyond the decoder limits count as no JSON.
    """
    stripped = text.strip()
    if not stripped:
        return None

    if stripped[0] in _BRACKET_PAIRS:
        try:
            return json.loads(stripped)
        except (ValueError, RecursionError):
            pass

    candidate = extract_balanced_json(stripped)
    if candidate is None:
        return None
    try:
        return json.loads(candidate)
    except (ValueError, RecursionError):
        return None


def _first_opening_index(text: str) -> Optional[int]:
    positions = [text.find(char) for char in _BRACKET_PAIRS]
    found = [position for position in positions if position != -1]
    if not found:
        return None
    return min(found)
