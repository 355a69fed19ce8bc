"""Shared utilities used across the rental engine and its collaborators."""

from datetime import date, datetime
from typing import Any, Optional


def coerce_date(value: Any) -> Optional[date]:
    """Reduce a stored date value to a calendar date, or None if unusable.

    Accepts ``date``/``datetime`` objects, ISO-8601 strings (with or without
    a time part, ``Z`` suffix allowed) and timestamp objects exposing
    ``to_datetime()``. Time of day is discarded.

    Examples:
        >>> coerce_date("2025-03-10T18:30:00Z")
        datetime.date(2025, 3, 10)
        >>> coerce_date("not a date") is None
        True
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if hasattr(value, "to_datetime"):
        return coerce_date(value.to_datetime())
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            return None
    return None


def normalize_status(value: Optional[str]) -> str:
    """Lower-case and trim an order status; missing status becomes ''."""
    return (value or "").strip().lower()


def rental_days(start: date, end: date) -> int:
    """Number of days between pickup and return, never negative.

    Examples:
        >>> rental_days(date(2025, 3, 10), date(2025, 3, 12))
        2
        >>> rental_days(date(2025, 3, 12), date(2025, 3, 10))
        0
    """
    return max(0, (end - start).days)
