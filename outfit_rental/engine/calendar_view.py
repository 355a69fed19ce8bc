"""
Calendar colouring for an outfit's availability.

Classifies each day (and each half-day) into one of four states so every
calendar view colours cells the same way:

    free      no unit of any checked size is out
    booked    units are out but every checked size has one left
    warning   some checked sizes are exhausted
    sold_out  every checked size is exhausted
"""

import calendar
from collections import OrderedDict
from datetime import date
from typing import Iterable, Mapping, Optional

from outfit_rental.config import settings
from outfit_rental.engine.occupancy import OccupancyLedger, build_occupancy
from outfit_rental.engine.slots import HalfDay, expand_slots, iter_days
from outfit_rental.errors import ConfigurationError, InvalidRangeError
from outfit_rental.schemas.availability_schema import DayAvailability, DayStatus
from outfit_rental.schemas.booking_schema import Booking
from outfit_rental.schemas.outfit_schema import Outfit


def classify_half(counts: Mapping[str, int], quantities: Mapping[str, int]) -> DayStatus:
    """Colour state of one half-day from units out per size and stock per size."""
    exhausted = [size for size, cap in quantities.items() if counts.get(size, 0) >= cap]
    if quantities and len(exhausted) == len(quantities):
        return DayStatus.SOLD_OUT
    if exhausted:
        return DayStatus.WARNING
    if any(counts.get(size, 0) for size in quantities):
        return DayStatus.BOOKED
    return DayStatus.FREE


def combine_halves(am: DayStatus, pm: DayStatus) -> DayStatus:
    """Whole-day state: sold out only when both halves are."""
    if am == pm == DayStatus.SOLD_OUT:
        return DayStatus.SOLD_OUT
    if {am, pm} & {DayStatus.SOLD_OUT, DayStatus.WARNING}:
        return DayStatus.WARNING
    if DayStatus.BOOKED in (am, pm):
        return DayStatus.BOOKED
    return DayStatus.FREE


def _checked_sizes(outfit: Outfit, sizes: Optional[Iterable[str]]) -> list[str]:
    checked = list(sizes) if sizes is not None else outfit.all_sizes
    if not checked:
        raise ConfigurationError(f"Outfit {outfit.id!r} has no sizes defined")
    unknown = [size for size in checked if outfit.all_sizes and size not in outfit.all_sizes]
    if unknown:
        raise ConfigurationError(
            f"Size(s) {', '.join(unknown)} not offered for outfit {outfit.id!r}"
        )
    return checked


def _day_from_ledger(
    ledger: OccupancyLedger, day: date, quantities: Mapping[str, int]
) -> DayAvailability:
    am_counts = ledger.half_counts(day, HalfDay.AM)
    pm_counts = ledger.half_counts(day, HalfDay.PM)
    am = classify_half(am_counts, quantities)
    pm = classify_half(pm_counts, quantities)
    exhausted = [
        size
        for size, cap in quantities.items()
        if am_counts.get(size, 0) >= cap or pm_counts.get(size, 0) >= cap
    ]
    return DayAvailability(
        day=day,
        am=am,
        pm=pm,
        status=combine_halves(am, pm),
        exhausted_sizes=exhausted,
        booking_ids=ledger.day_holders(day),
    )


def build_calendar(
    bookings: Iterable[Booking],
    outfit: Outfit,
    start: date,
    end: date,
    buffer_days: Optional[int] = None,
    sizes: Optional[Iterable[str]] = None,
) -> list[DayAvailability]:
    """
    Classify every day from ``start`` to ``end`` inclusive.

    One occupancy pass covers the whole range, so rendering a month costs
    the same as checking a single rental.
    """
    if end < start:
        raise InvalidRangeError(
            f"End date {end.isoformat()} is before start date {start.isoformat()}"
        )
    if buffer_days is None:
        buffer_days = settings.rental.buffer_days
    checked = _checked_sizes(outfit, sizes)
    quantities = {size: outfit.quantity_for(size) for size in checked}
    negative = [size for size, quantity in quantities.items() if quantity < 0]
    if negative:
        raise ConfigurationError(f"Negative stock configured for size(s) {', '.join(negative)}")

    ledger = build_occupancy(
        bookings,
        outfit.id,
        outfit.code,
        checked,
        expand_slots(start, end),
        buffer_days=buffer_days,
    )
    return [_day_from_ledger(ledger, day, quantities) for day in iter_days(start, end)]


def classify_day(
    bookings: Iterable[Booking],
    outfit: Outfit,
    day: date,
    buffer_days: Optional[int] = None,
    sizes: Optional[Iterable[str]] = None,
) -> DayAvailability:
    """Colour state of a single calendar cell."""
    return build_calendar(bookings, outfit, day, day, buffer_days, sizes)[0]


def month_calendar(
    bookings: Iterable[Booking],
    outfit: Outfit,
    year: int,
    month: int,
    buffer_days: Optional[int] = None,
    sizes: Optional[Iterable[str]] = None,
) -> list[DayAvailability]:
    """Classify every day of one month."""
    last_day = calendar.monthrange(year, month)[1]
    return build_calendar(
        bookings, outfit, date(year, month, 1), date(year, month, last_day), buffer_days, sizes
    )


def _add_months(first_of_month: date, months: int) -> date:
    index = first_of_month.year * 12 + first_of_month.month - 1 + months
    return date(index // 12, index % 12 + 1, 1)


def calendar_months(
    bookings: Iterable[Booking],
    outfit: Outfit,
    first_month: date,
    months: Optional[int] = None,
    buffer_days: Optional[int] = None,
    sizes: Optional[Iterable[str]] = None,
) -> "OrderedDict[date, list[DayAvailability]]":
    """Classify consecutive months starting at the month of ``first_month``.

    Keys are the first day of each month.
    """
    if months is None:
        months = settings.rental.calendar_months
    if months < 1:
        raise ValueError(f"months must be >= 1, got {months}")

    start = first_month.replace(day=1)
    end = date.fromordinal(_add_months(start, months).toordinal() - 1)
    grouped: "OrderedDict[date, list[DayAvailability]]" = OrderedDict()
    for cell in build_calendar(list(bookings), outfit, start, end, buffer_days, sizes):
        grouped.setdefault(cell.day.replace(day=1), []).append(cell)
    return grouped
