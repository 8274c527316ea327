"""Scalar coercion helpers used when applying a table schema.

Every helper returns ``None`` when a value cannot be coerced; the caller
decides whether that drops the row (required column) or falls back to a
default (optional column).
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime
from typing import Any, Iterable

_SPACES = re.compile(r"\s+")


def to_text(value: Any) -> str:
    """Return `value` as a trimmed string; missing values become ``""``."""
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    return str(value).strip()


def to_number(value: Any, decimal_mark: str = ".", thousands_sep: str = ",") -> float | None:
    """Coerce a cell to a finite float.

    Accepts thousands separators, embedded spaces and a configurable decimal
    mark, so ``"1,234.5"`` (default marks) and ``"1.234,5"`` (``decimal_mark=","``,
    ``thousands_sep="."``) both give ``1234.5``.

    Args:
        value: Raw cell value.
        decimal_mark: Character separating the fractional part.
        thousands_sep: Grouping character to strip; may be empty.

    Returns:
        The parsed float, or None for empty, non-numeric or non-finite input.

    Raises:
        ValueError: if `decimal_mark` and `thousands_sep` are the same character.
    """
    if decimal_mark == thousands_sep:
        raise ValueError(f"decimal mark and thousands separator must differ, both are {decimal_mark!r}")
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else None

    text = _SPACES.sub("", to_text(value))
    if not text:
        return None
    if thousands_sep:
        text = text.replace(thousands_sep, "")
    if decimal_mark != ".":
        text = text.replace(decimal_mark, ".")

    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def to_integer(value: Any, decimal_mark: str = ".", thousands_sep: str = ",") -> int | None:
    """Coerce a cell to an int; fractional values are rejected (``"2020.0"`` is fine)."""
    number = to_number(value, decimal_mark=decimal_mark, thousands_sep=thousands_sep)
    if number is None or not number.is_integer():
        return None
    return int(number)


def to_date(value: Any, formats: Iterable[str] = ()) -> date | None:
    """Parse a cell into a calendar date.

    ISO dates and timestamps are tried first (a trailing ``Z`` is accepted),
    then each `strptime` format in order.

    Args:
        value: Raw cell value; `date`/`datetime` instances pass through.
        formats: Extra `strptime` formats such as ``"%m/%d/%Y"``.

    Returns:
        The parsed `date`, or None if no format matches.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = to_text(value)
    if not text:
        return None

    try:
        return datetime.fromisoformat(text.replace("Z", "")).date()
    except ValueError:
        pass

    for fmt in formats:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None
