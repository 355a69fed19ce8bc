"""
Availability checks for a draft order.

The order-add and order-edit screens hold a pickup/return window and a
list of outfit rows. Each row with a chosen size gets its own
single-size check; the edit screen excludes the order being edited so
it does not collide with itself.
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from outfit_rental.engine.availability import check_availability
from outfit_rental.errors import ConfigurationError, InvalidRangeError
from outfit_rental.logging_context import get_studio_logger
from outfit_rental.schemas.availability_schema import AvailabilityRequest, AvailabilityResult
from outfit_rental.schemas.booking_schema import Booking, DaySlot, LineItem
from outfit_rental.schemas.outfit_schema import Outfit
from outfit_rental.tools.catalog import OutfitCatalog
from outfit_rental.utils import rental_days

logger = get_studio_logger(__name__)


@dataclass
class DraftItem:
    """One outfit row on the order form."""

    outfit_key: str
    size: Optional[str] = None


@dataclass
class DraftRowCheck:
    """Availability verdict for a single draft row."""

    item: DraftItem
    outfit: Optional[Outfit] = None
    result: Optional[AvailabilityResult] = None
    error: Optional[str] = None

    @property
    def is_blocked(self) -> bool:
        return self.result is not None and not self.result.available


@dataclass
class DraftOrderCheck:
    """All row verdicts for a draft order."""

    rows: list[DraftRowCheck]
    rental_days: int

    @property
    def has_conflicts(self) -> bool:
        return any(row.is_blocked for row in self.rows)

    @property
    def has_errors(self) -> bool:
        return any(row.error for row in self.rows)

    def to_line_items(self) -> list[LineItem]:
        """Line items for rows that resolved to an outfit and a size."""
        return [
            LineItem(
                outfit_id=row.outfit.id,
                design_code=row.outfit.code,
                design_name=row.outfit.name,
                size=row.item.size,
                rental_price=row.outfit.rental_price,
            )
            for row in self.rows
            if row.outfit is not None and row.item.size
        ]


def check_draft_order(
    catalog: OutfitCatalog,
    bookings: Iterable[Booking],
    items: list[DraftItem],
    start_date: date,
    end_date: date,
    pickup_slot: DaySlot = DaySlot.MORNING,
    return_slot: DaySlot = DaySlot.AFTERNOON,
    buffer_days: Optional[int] = None,
    exclude_booking_id: Optional[str] = None,
) -> DraftOrderCheck:
    """
    Check every row of a draft order against the current order snapshot.

    Rows without a size are left unchecked (``result`` is None). Unknown
    outfits and sizes are reported on the row instead of aborting the
    whole draft.

    Raises:
        InvalidRangeError: If pickup is after return.
    """
    if end_date < start_date:
        raise InvalidRangeError("Pickup date cannot be after return date")

    snapshot = list(bookings)
    extra: dict = {}
    if buffer_days is not None:
        extra["buffer_days"] = buffer_days

    rows = []
    for item in items:
        outfit = catalog.get(item.outfit_key)
        if outfit is None:
            rows.append(DraftRowCheck(item=item, error=f"Outfit {item.outfit_key} not found"))
            continue
        if not item.size:
            rows.append(DraftRowCheck(item=item, outfit=outfit))
            continue

        request = AvailabilityRequest.for_outfit(
            outfit,
            start_date,
            end_date,
            size=item.size,
            pickup_slot=pickup_slot,
            return_slot=return_slot,
            exclude_booking_id=exclude_booking_id,
            **extra,
        )
        try:
            result = check_availability(snapshot, request)
        except ConfigurationError as exc:
            rows.append(DraftRowCheck(item=item, outfit=outfit, error=str(exc)))
            continue
        rows.append(DraftRowCheck(item=item, outfit=outfit, result=result))

    check = DraftOrderCheck(rows=rows, rental_days=rental_days(start_date, end_date))
    if check.has_conflicts:
        logger.info(
            "Draft order has %d blocked row(s)",
            sum(1 for row in rows if row.is_blocked),
        )
    return check
