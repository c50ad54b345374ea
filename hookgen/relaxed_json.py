"""Lenient parsing of hand-typed example JSON.

Two stages: parse as JSON5, and on failure apply one repair pass that
inserts the commas people forget between adjacent values, then parse
again. The repair is a pattern match over text, not a parser; exotic
malformations are expected to fail with both error messages rather than
be silently mis-repaired.
"""

from __future__ import annotations

import re
from typing import Any

import json5

from .errors import InputParseError

# A closing brace/bracket/quote followed by an opening quote with no comma
_MISSING_COMMA_AFTER_CLOSE = re.compile(r'([}\]"])(?!\s*[,}])\s*"')
# A number followed by an opening quote with no comma
_MISSING_COMMA_AFTER_NUMBER = re.compile(r'(\d+)(?!\s*[,}])\s*"')


def repair(text: str) -> str:
    """Insert missing commas between adjacent values."""
    repaired = _MISSING_COMMA_AFTER_CLOSE.sub(r'\1, "', text)
    return _MISSING_COMMA_AFTER_NUMBER.sub(r'\1, "', repaired)


def parse_json(text: str) -> Any:
    """Parse example text, repairing it once if needed."""
    try:
        return json5.loads(text)
    except ValueError as exc:
        original = str(exc)

    try:
        return json5.loads(repair(text))
    except ValueError as exc:
        repaired = str(exc)

    raise InputParseError(
        f"Invalid JSON: {original}. Repair attempt failed: {repaired}",
        original_error=original,
        repair_error=repaired,
    )
