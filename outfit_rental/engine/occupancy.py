"""
Per-size, per-slot occupancy ledger.

Both the availability verdict and the calendar colouring read from this
one ledger, so the two views always agree on how many units of a size
are out during any half-day.
"""

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional

from outfit_rental.engine.slots import BOTH_HALVES, HalfDay, Slot, expand_slots
from outfit_rental.logging_context import get_studio_logger
from outfit_rental.schemas.booking_schema import Booking, LineItem

logger = get_studio_logger(__name__)


@dataclass
class OccupancyLedger:
    """Units of each size held during each slot of a window."""

    window: list[Slot]
    sizes: list[str]
    counts: dict[str, Counter] = field(default_factory=lambda: defaultdict(Counter))
    holders: dict[str, dict[Slot, list[str]]] = field(
        default_factory=lambda: defaultdict(lambda: defaultdict(list))
    )
    booking_ids: list[str] = field(default_factory=list)
    skipped_ids: list[str] = field(default_factory=list)

    def count(self, size: str, slot: Slot) -> int:
        return self.counts[size][slot] if size in self.counts else 0

    def peak(self, size: str) -> int:
        """Highest number of units of ``size`` out during any window slot."""
        return max((self.count(size, slot) for slot in self.window), default=0)

    def peak_holders(self, size: str) -> list[str]:
        """Ids of bookings present in any slot where ``size`` hits its peak."""
        peak = self.peak(size)
        if peak == 0:
            return []
        ids: dict[str, None] = {}
        for slot in self.window:
            if self.count(size, slot) == peak:
                ids.update(dict.fromkeys(self.holders[size][slot]))
        return list(ids)

    def slot_holders(self, size: str, slot: Slot) -> list[str]:
        if size not in self.holders:
            return []
        return list(dict.fromkeys(self.holders[size].get(slot, [])))

    def half_counts(self, day: date, half: HalfDay) -> dict[str, int]:
        """Units out per size during one half-day."""
        slot = Slot(day, half)
        return {size: self.count(size, slot) for size in self.sizes}

    def day_holders(self, day: date) -> list[str]:
        """Ids of bookings holding any size on ``day``."""
        ids: dict[str, None] = {}
        for size in self.sizes:
            for half in BOTH_HALVES:
                ids.update(dict.fromkeys(self.slot_holders(size, Slot(day, half))))
        return list(ids)


def _units_by_size(items: list[LineItem], sizes: list[str]) -> Counter:
    """Units each size loses to these line items.

    An item without a recorded size (legacy orders) holds one unit of
    every tracked size.
    """
    units: Counter = Counter()
    for item in items:
        if item.size is None:
            for size in sizes:
                units[size] += 1
        elif item.size in sizes:
            units[item.size] += 1
    return units


def build_occupancy(
    bookings: Iterable[Booking],
    outfit_id: str,
    design_code: Optional[str],
    sizes: list[str],
    window: list[Slot],
    buffer_days: int = 0,
    exclude_booking_id: Optional[str] = None,
) -> OccupancyLedger:
    """
    Count how many units of each size existing bookings hold in ``window``.

    Cancelled bookings, the excluded booking and bookings that never
    mention the outfit are ignored. Bookings without usable dates are
    skipped and logged; they never abort the computation.
    """
    ledger = OccupancyLedger(window=list(window), sizes=list(sizes))
    window_set = set(ledger.window)

    for booking in bookings:
        if booking.is_cancelled:
            continue
        if exclude_booking_id is not None and booking.id == exclude_booking_id:
            continue
        items = booking.items_for(outfit_id, design_code)
        if not items:
            continue

        rental_window = booking.rental_window()
        if rental_window is None:
            logger.debug("Skipping booking %s: no usable rental dates", booking.id)
            ledger.skipped_ids.append(booking.id)
            continue

        units = _units_by_size(items, ledger.sizes)
        if not units:
            continue

        start, end = rental_window
        occupied = [
            slot
            for slot in expand_slots(
                start, end, booking.pickup_slot, booking.return_slot, buffer_days
            )
            if slot in window_set
        ]
        if not occupied:
            continue

        for size, quantity in units.items():
            for slot in occupied:
                ledger.counts[size][slot] += quantity
                ledger.holders[size][slot].append(booking.id)
        ledger.booking_ids.append(booking.id)

    return ledger
