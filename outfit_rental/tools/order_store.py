"""
In-memory rental order store.

Stands in for the studio's hosted order database. It scopes orders by
studio and hands the availability engine plain snapshots; it makes no
attempt to serialise concurrent bookings.
"""

import uuid
from datetime import date
from typing import Iterable, Optional, TypedDict

from outfit_rental.logging_context import get_studio_logger, set_studio_id
from outfit_rental.schemas.booking_schema import Booking, DaySlot, LineItem

logger = get_studio_logger(__name__)

# Statuses that mean the outfit is already back in the studio
RETURNED_STATUSES = frozenset({"returned", "completed", "done"})


def _pickup_day(order: Booking) -> Optional[date]:
    window = order.rental_window()
    return window[0] if window else None


def _return_day(order: Booking) -> Optional[date]:
    window = order.rental_window()
    return window[1] if window else None


class OrderResult(TypedDict, total=False):
    """Result from create, add, cancel or update_status."""

    success: bool
    message: str
    order_id: str
    order: Booking


class OrderStore:
    """Studio-scoped collection of rental orders."""

    def __init__(self, orders: Optional[Iterable[Booking]] = None) -> None:
        self._orders: dict[str, Booking] = {}
        for order in orders or []:
            self._orders[order.id] = order

    def add(self, order: Booking) -> OrderResult:
        """Store an order that already carries its id."""
        if order.id in self._orders:
            return {"success": False, "message": f"Order {order.id} already exists."}
        self._orders[order.id] = order
        logger.info("Order stored: %s for studio %s", order.id, order.studio_id)
        return {
            "success": True,
            "order_id": order.id,
            "message": f"Order {order.id} saved.",
            "order": order,
        }

    def create(
        self,
        studio_id: str,
        customer_name: str,
        items: list[LineItem],
        start_date: date,
        end_date: date,
        pickup_slot: DaySlot = DaySlot.MORNING,
        return_slot: DaySlot = DaySlot.AFTERNOON,
    ) -> OrderResult:
        """Create a new pending order and return the confirmation details."""
        set_studio_id(studio_id)
        missing = [
            field_name
            for field_name, value in [("customer_name", customer_name), ("items", items)]
            if not value
        ]
        if missing:
            return {
                "success": False,
                "message": f"Cannot create order - missing required fields: {', '.join(missing)}.",
            }
        if end_date < start_date:
            return {"success": False, "message": "Pickup date cannot be after return date."}

        order = Booking(
            id=f"ORD-{uuid.uuid4().hex[:6].upper()}",
            studio_id=studio_id,
            customer_name=customer_name,
            status="pending",
            start_date=start_date,
            end_date=end_date,
            pickup_slot=pickup_slot,
            return_slot=return_slot,
            items=items,
        )
        return self.add(order)

    def get(self, order_id: str) -> Optional[Booking]:
        """Retrieve an order by id."""
        return self._orders.get(order_id)

    def update_status(self, order_id: str, status: str) -> OrderResult:
        """Replace an order's status; the stored snapshot is swapped, not mutated."""
        order = self._orders.get(order_id)
        if order is None:
            return {"success": False, "message": f"Order {order_id} not found."}
        updated = order.model_copy(update={"status": status.strip().lower()})
        self._orders[order_id] = updated
        logger.info("Order %s status: %s -> %s", order_id, order.status, updated.status)
        return {
            "success": True,
            "order_id": order_id,
            "message": f"Order {order_id} is now {updated.status}.",
            "order": updated,
        }

    def cancel(self, order_id: str) -> OrderResult:
        """Cancel an order so it stops holding stock."""
        return self.update_status(order_id, "cancelled")

    def for_studio(self, studio_id: str) -> list[Booking]:
        """All orders of one studio, cancelled ones included.

        Makes ``studio_id`` the active studio, so log lines from the checks
        run on these orders are tagged with it.
        """
        set_studio_id(studio_id)
        orders = [order for order in self._orders.values() if order.studio_id == studio_id]
        logger.debug("Loaded %d order(s) for studio %s", len(orders), studio_id)
        return orders

    def for_outfit(
        self, studio_id: str, outfit_id: str, design_code: Optional[str] = None
    ) -> list[Booking]:
        """Non-cancelled studio orders that mention the outfit."""
        return [
            order
            for order in self.for_studio(studio_id)
            if not order.is_cancelled and order.items_for(outfit_id, design_code)
        ]

    def pickups_on(self, studio_id: str, day: date) -> list[Booking]:
        """Orders to prepare for collection on ``day``."""
        return [
            order
            for order in self.for_studio(studio_id)
            if not order.is_cancelled and _pickup_day(order) == day
        ]

    def returns_on(self, studio_id: str, day: date) -> list[Booking]:
        """Orders expected back on ``day`` that have not been returned yet."""
        return [
            order
            for order in self.for_studio(studio_id)
            if not order.is_cancelled
            and order.status not in RETURNED_STATUSES
            and _return_day(order) == day
        ]

    def reset(self) -> None:
        """Clear all orders. Used by test fixtures for isolation."""
        self._orders.clear()
