"""
Coercion of untyped raw scalars into typed values.

Raw extracts deliver every field as a string (or whatever the reader
inferred). These helpers return None for null or blank input and raise
ValueError when a non-blank value cannot be parsed.
"""

from datetime import date, datetime
from typing import Any

SOURCE_DATE_LENGTH = 8


def to_text(value: Any) -> str | None:
    """Trim a raw value to text; None and blank strings become None."""
    if value is None:
        return None
    text = value.strip() if isinstance(value, str) else str(value).strip()
    return text or None


def to_int(value: Any) -> int | None:
    """
    Coerce a raw value to int.

    Accepts ints, integral floats and numeric strings ("42", "42.0").

    Raises:
        ValueError: If the value is not an integral number
    """
    if value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"Cannot coerce non-integral float {value} to int")
        return int(value)

    text = to_text(value)
    if text is None:
        return None
    try:
        return int(text)
    except ValueError:
        number = float(text)
        if not number.is_integer():
            raise ValueError(f"Cannot coerce '{text}' to int")
        return int(number)


def to_float(value: Any) -> float | None:
    """
    Coerce a raw value to float.

    Raises:
        ValueError: If the value is not numeric
    """
    if value is None:
        return None
    if isinstance(value, int | float) and not isinstance(value, bool):
        return float(value)
    text = to_text(value)
    if text is None:
        return None
    return float(text)


def to_date(value: Any) -> date | None:
    """
    Coerce a raw value to a date.

    Accepts date/datetime objects and ISO strings, with or without a time
    part ("2011-01-01", "2011-01-01 00:00:00", "2011-01-01T00:00:00").

    Raises:
        ValueError: If the value is not an ISO date
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = to_text(value)
    if text is None:
        return None
    if len(text) > 10:
        return datetime.fromisoformat(text.replace(" ", "T", 1)).date()
    return date.fromisoformat(text)


def compact_int_to_date(value: Any) -> date | None:
    """
    Parse a source date stored as an integer YYYYMMDD.

    Zero, anything that is not exactly eight digits, and impossible calendar
    dates all yield None.
    """
    try:
        number = to_int(value)
    except ValueError:
        return None
    if number is None or number <= 0:
        return None

    digits = str(number)
    if len(digits) != SOURCE_DATE_LENGTH:
        return None
    try:
        return datetime.strptime(digits, "%Y%m%d").date()
    except ValueError:
        return None
