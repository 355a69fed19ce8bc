"""
Half-day slot expansion.

A rental occupies an outfit from its pickup half-day through its return
half-day. This module turns a (start, end, pickup slot, return slot)
tuple into the explicit set of half-day slots it holds, optionally
followed by full cleaning days.

Usage:
    slots = expand_slots(date(2025, 3, 10), date(2025, 3, 12),
                         DaySlot.AFTERNOON, DaySlot.MORNING, buffer_days=2)
    [str(s) for s in slots]
    # ['2025-03-10_PM', '2025-03-11_AM', '2025-03-11_PM', '2025-03-12_AM',
    #  '2025-03-13_AM', '2025-03-13_PM', '2025-03-14_AM', '2025-03-14_PM']
"""

from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Iterator

from outfit_rental.errors import ConfigurationError, InvalidRangeError
from outfit_rental.schemas.booking_schema import DaySlot


class HalfDay(str, Enum):
    """The two occupancy units of a calendar day."""

    AM = "AM"
    PM = "PM"


BOTH_HALVES: tuple[HalfDay, HalfDay] = (HalfDay.AM, HalfDay.PM)


@dataclass(frozen=True, order=True)
class Slot:
    """One half-day of one calendar date."""

    day: date
    half: HalfDay

    @property
    def key(self) -> str:
        return f"{self.day.isoformat()}_{self.half.value}"

    @classmethod
    def parse(cls, key: str) -> "Slot":
        """Inverse of ``key``: ``"2025-03-10_PM"`` -> Slot(2025-03-10, PM)."""
        day_part, _, half_part = key.partition("_")
        try:
            return cls(date.fromisoformat(day_part), HalfDay(half_part))
        except ValueError:
            raise ValueError(f"Invalid slot key: {key!r}") from None

    def __str__(self) -> str:
        return self.key


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every calendar date from start to end inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def _occupied_halves(
    is_first: bool, is_last: bool, pickup_slot: DaySlot, return_slot: DaySlot
) -> list[HalfDay]:
    if is_first and is_last:
        halves = []
        if pickup_slot == DaySlot.MORNING:
            halves.append(HalfDay.AM)
        if return_slot == DaySlot.AFTERNOON:
            halves.append(HalfDay.PM)
        return halves
    if is_first:
        return list(BOTH_HALVES) if pickup_slot == DaySlot.MORNING else [HalfDay.PM]
    if is_last:
        return list(BOTH_HALVES) if return_slot == DaySlot.AFTERNOON else [HalfDay.AM]
    return list(BOTH_HALVES)


def expand_slots(
    start: date,
    end: date,
    pickup_slot: DaySlot = DaySlot.MORNING,
    return_slot: DaySlot = DaySlot.AFTERNOON,
    buffer_days: int = 0,
) -> list[Slot]:
    """
    Expand a rental range into the half-day slots it occupies.

    Args:
        start: First day of the rental.
        end: Last day of the rental (inclusive).
        pickup_slot: Half-day the outfit leaves on ``start``.
        return_slot: Half-day the outfit comes back on ``end``.
        buffer_days: Full days blocked after ``end`` for cleaning.

    Returns:
        Chronological, duplicate-free list of slots.

    Raises:
        InvalidRangeError: If ``end`` is before ``start``.
        ConfigurationError: If ``buffer_days`` is negative.
    """
    if end < start:
        raise InvalidRangeError(
            f"End date {end.isoformat()} is before start date {start.isoformat()}"
        )
    if buffer_days < 0:
        raise ConfigurationError(f"Buffer days must be >= 0, got {buffer_days}")

    slots: dict[Slot, None] = {}
    for day in iter_days(start, end):
        for half in _occupied_halves(day == start, day == end, pickup_slot, return_slot):
            slots[Slot(day, half)] = None

    if buffer_days:
        buffer_start = end + timedelta(days=1)
        for day in iter_days(buffer_start, end + timedelta(days=buffer_days)):
            for half in BOTH_HALVES:
                slots[Slot(day, half)] = None

    return list(slots)
