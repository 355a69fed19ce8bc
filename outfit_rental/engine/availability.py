"""
Outfit availability check over half-day slots.

Given a snapshot of existing orders and a prospective rental, decide
whether a unit of the requested size (or of any size, in auto mode) is
free for every half-day of the rental.

Usage:
    request = AvailabilityRequest.for_outfit(
        outfit, date(2025, 3, 10), date(2025, 3, 12), size="M", buffer_days=2
    )
    result = check_availability(orders, request)
    if not result.available:
        print(result.reason)  # "Size M fully booked on 2025-03-12"
"""

from datetime import date
from itertools import groupby
from typing import Iterable, Optional

from outfit_rental.engine.occupancy import OccupancyLedger, build_occupancy
from outfit_rental.engine.slots import HalfDay, Slot, expand_slots
from outfit_rental.errors import ConfigurationError, InvalidRangeError
from outfit_rental.logging_context import get_studio_logger
from outfit_rental.schemas.availability_schema import (
    AvailabilityMode,
    AvailabilityRequest,
    AvailabilityResult,
    BlockReason,
    SizeAvailability,
)
from outfit_rental.schemas.booking_schema import Booking

logger = get_studio_logger(__name__)


def _tracked_sizes(request: AvailabilityRequest) -> list[str]:
    """Sizes whose occupancy decides the verdict."""
    outfit_sizes = request.outfit_sizes
    if request.size is not None:
        if outfit_sizes and request.size not in outfit_sizes:
            raise ConfigurationError(
                f"Size {request.size!r} is not offered for outfit {request.outfit_id!r}"
            )
        if not outfit_sizes and not request.total_stock:
            raise ConfigurationError(f"Outfit {request.outfit_id!r} has no sizes defined")
        return [request.size]
    if not outfit_sizes:
        raise ConfigurationError(f"Outfit {request.outfit_id!r} has no sizes defined")
    return outfit_sizes


def _block_reason(blocked: list[HalfDay]) -> BlockReason:
    if blocked == [HalfDay.AM]:
        return BlockReason.PICKUP_SLOT_OCCUPIED
    if blocked == [HalfDay.PM]:
        return BlockReason.RETURN_SLOT_OCCUPIED
    return BlockReason.FULLY_BOOKED


def _first_blocking_day(
    ledger: OccupancyLedger, size: str, stock: int
) -> Optional[tuple[date, Slot, BlockReason]]:
    """Walk the window day by day; stop at the first day with a full half."""
    for day, day_slots in groupby(ledger.window, key=lambda slot: slot.day):
        blocked = [slot for slot in day_slots if ledger.count(size, slot) >= stock]
        if blocked:
            return day, blocked[0], _block_reason([slot.half for slot in blocked])
    return None


def _evaluate_size(ledger: OccupancyLedger, size: str, stock: int) -> SizeAvailability:
    peak = ledger.peak(size)
    remaining = max(0, stock - peak)
    summary = SizeAvailability(
        size=size,
        total_stock=stock,
        peak_usage=peak,
        available_quantity=remaining,
        available=remaining > 0,
        blocking_bookings=ledger.peak_holders(size),
    )
    blocking = _first_blocking_day(ledger, size, stock)
    if blocking is not None:
        day, slot, reason = blocking
        summary.blocking_day = day
        summary.blocking_slot = slot.key
        summary.blocking_reason = reason
    return summary


def _describe(mode: AvailabilityMode, headline: SizeAvailability,
              per_size: list[SizeAvailability]) -> str:
    if mode == AvailabilityMode.SINGLE:
        if headline.available:
            return (
                f"Available: {headline.available_quantity} of "
                f"{headline.total_stock} in size {headline.size}"
            )
        return f"Size {headline.size} {_conflict_text(headline)}"

    free_sizes = [entry.size for entry in per_size if entry.available]
    if free_sizes:
        return f"Available in size(s) {', '.join(free_sizes)}"
    return (
        "No size is free for the whole range "
        f"(first conflict: size {headline.size} {_conflict_text(headline)})"
    )


def _conflict_text(entry: SizeAvailability) -> str:
    if entry.blocking_day is None or entry.blocking_reason is None:
        return "is fully booked"
    return f"{entry.blocking_reason.value} on {entry.blocking_day.isoformat()}"


def check_availability(
    bookings: Iterable[Booking], request: AvailabilityRequest
) -> AvailabilityResult:
    """
    Check whether the requested outfit can be rented for the requested range.

    Args:
        bookings: Snapshot of the studio's orders. Cancelled and malformed
            orders are ignored.
        request: The prospective rental.

    Returns:
        AvailabilityResult with the verdict and the occupancy that drove it.

    Raises:
        InvalidRangeError: If the range ends before it starts or holds no slot.
        ConfigurationError: If the outfit has no sizes, the size is unknown,
            or stock/buffer values are negative.
    """
    if request.buffer_days < 0:
        raise ConfigurationError(f"Buffer days must be >= 0, got {request.buffer_days}")

    window = expand_slots(
        request.start_date, request.end_date, request.pickup_slot, request.return_slot
    )
    if not window:
        raise InvalidRangeError(
            f"Pickup {request.pickup_slot.value} / return {request.return_slot.value} "
            f"on {request.start_date.isoformat()} covers no half-day"
        )

    sizes = _tracked_sizes(request)
    stocks = {size: request.stock_for(size) for size in sizes}
    negative = [size for size, stock in stocks.items() if stock < 0]
    if negative:
        raise ConfigurationError(f"Negative stock configured for size(s) {', '.join(negative)}")

    ledger = build_occupancy(
        bookings,
        request.outfit_id,
        request.design_code,
        sizes,
        window,
        buffer_days=request.buffer_days,
        exclude_booking_id=request.exclude_booking_id,
    )
    per_size = [_evaluate_size(ledger, size, stocks[size]) for size in sizes]

    mode = request.mode
    if mode == AvailabilityMode.SINGLE:
        headline = per_size[0]
    else:
        # max() keeps the first of equal candidates, i.e. outfit size order
        headline = max(per_size, key=lambda entry: entry.available_quantity)
    available = any(entry.available for entry in per_size)

    result = AvailabilityResult(
        available=available,
        available_quantity=headline.available_quantity,
        total_stock=headline.total_stock,
        peak_usage=headline.peak_usage,
        blocking_bookings=headline.blocking_bookings,
        reason=_describe(mode, headline, per_size),
        size=headline.size,
        mode=mode,
        blocking_day=headline.blocking_day,
        blocking_slot=headline.blocking_slot,
        per_size=per_size,
    )
    logger.debug(
        "Availability %s %s-%s size=%s: available=%s peak=%d/%d (%d order(s) counted)",
        request.outfit_id,
        request.start_date.isoformat(),
        request.end_date.isoformat(),
        request.size or "any",
        result.available,
        result.peak_usage,
        result.total_stock,
        len(ledger.booking_ids),
    )
    return result
