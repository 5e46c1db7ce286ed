"""
crossref/keys.py

Best-effort numeric parsing for join keys and fleet attributes.

Every helper returns ``None`` instead of raising when the value cannot be
read as a number. Blank strings are missing values, never zero.
"""

from __future__ import annotations

import math

JoinKey = int | float


def parse_join_key(value: object) -> JoinKey | None:
    """
    Parse a model identifier into a hashable numeric key.

    Integral values collapse to ``int`` so ``"12"``, ``12`` and ``12.0``
    produce the same key. Integer text is read exactly, without a float
    round trip. Booleans, blanks, NaN and infinities are rejected.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        number = value
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return None
    if not math.isfinite(number):
        return None
    return int(number) if number.is_integer() else number


def parse_int(value: object) -> int | None:
    """Parse an integral attribute such as a year, fleet size or sort order."""
    key = parse_join_key(value)
    if key is None:
        return None
    return int(key)


def parse_text(value: object) -> str:
    """Render a free-text cell, mapping ``None`` and NaN to an empty string."""
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    return str(value).strip()


def parse_code(value: object) -> str:
    """
    Render a code cell as text, keeping its case.

    Spreadsheet readers turn numeric codes into floats (3 -> 3.0); integral
    floats are rendered without the fractional part.
    """
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    return parse_text(value)
