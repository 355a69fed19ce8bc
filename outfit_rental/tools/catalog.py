"""
In-memory outfit catalog.

Stands in for the studio's hosted outfit collection: lookup by id or
design code, per-size stock, and the archive guard that refuses to hide
an outfit while orders still hold it.
"""

from datetime import date, timedelta
from typing import Iterable, Optional, TypedDict

from outfit_rental.config import settings
from outfit_rental.logging_context import get_studio_logger
from outfit_rental.schemas.booking_schema import Booking
from outfit_rental.schemas.outfit_schema import Outfit

logger = get_studio_logger(__name__)


class CatalogResult(TypedDict, total=False):
    """Result from add or archive."""

    success: bool
    message: str
    outfit_id: str
    blocking_orders: list[str]


class OutfitCatalog:
    """Outfits keyed by id, searchable by design code."""

    def __init__(self, outfits: Optional[Iterable[Outfit]] = None) -> None:
        self._outfits: dict[str, Outfit] = {}
        for outfit in outfits or []:
            self._outfits[outfit.id] = outfit

    def add(self, outfit: Outfit) -> CatalogResult:
        """Register an outfit. Every outfit needs at least one size."""
        if outfit.id in self._outfits:
            return {"success": False, "message": f"Outfit {outfit.id} already exists."}
        if not outfit.all_sizes:
            return {"success": False, "message": f"Outfit {outfit.id} has no sizes defined."}
        self._outfits[outfit.id] = outfit
        logger.info("Outfit added: %s (%s) sizes=%s", outfit.id, outfit.code, outfit.all_sizes)
        return {"success": True, "outfit_id": outfit.id, "message": f"Outfit {outfit.name} added."}

    def get(self, key: str) -> Optional[Outfit]:
        """Find an outfit by id, or by design code ignoring case."""
        if key in self._outfits:
            return self._outfits[key]
        normalized = key.strip().upper()
        for outfit in self._outfits.values():
            if outfit.code and outfit.code.upper() == normalized:
                return outfit
        return None

    def active(self) -> list[Outfit]:
        """Outfits that are not archived."""
        return [outfit for outfit in self._outfits.values() if not outfit.is_archived]

    def future_bookings(
        self,
        outfit: Outfit,
        bookings: Iterable[Booking],
        today: Optional[date] = None,
        buffer_days: Optional[int] = None,
    ) -> list[Booking]:
        """Non-cancelled orders for the outfit that end (buffer included) today or later."""
        today = today or date.today()
        if buffer_days is None:
            buffer_days = settings.rental.buffer_days
        upcoming = []
        for booking in bookings:
            if booking.is_cancelled or not booking.items_for(outfit.id, outfit.code):
                continue
            window = booking.rental_window()
            if window is not None and window[1] + timedelta(days=buffer_days) >= today:
                upcoming.append(booking)
        return upcoming

    def archive(
        self, key: str, bookings: Iterable[Booking], today: Optional[date] = None
    ) -> CatalogResult:
        """Archive an outfit unless pending or future orders still hold it."""
        outfit = self.get(key)
        if outfit is None:
            return {"success": False, "message": f"Outfit {key} not found."}
        upcoming = self.future_bookings(outfit, bookings, today)
        if upcoming:
            return {
                "success": False,
                "outfit_id": outfit.id,
                "message": (
                    f"Cannot archive: this outfit has {len(upcoming)} "
                    "pending or future booking(s)."
                ),
                "blocking_orders": [booking.id for booking in upcoming],
            }
        self._outfits[outfit.id] = outfit.model_copy(update={"status": "Archived"})
        logger.info("Outfit archived: %s", outfit.id)
        return {"success": True, "outfit_id": outfit.id, "message": f"Outfit {outfit.name} archived."}

    def reset(self) -> None:
        """Clear the catalog. Used by test fixtures for isolation."""
        self._outfits.clear()
