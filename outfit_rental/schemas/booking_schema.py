"""Rental order (booking) data models as read from the order repository."""

from datetime import date
from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from outfit_rental.utils import coerce_date, normalize_status

# Statuses whose orders no longer hold stock
CANCELLED_STATUSES: frozenset[str] = frozenset({
    "cancelled",
    "returned",
    "rejected",
    "failed",
    "returned_early_cancelled",
})

_SLOT_ALIASES = {
    "morning": "Morning",
    "am": "Morning",
    "afternoon": "Afternoon",
    "pm": "Afternoon",
}


class DaySlot(str, Enum):
    """Half of the day in which an outfit is picked up or returned."""

    MORNING = "Morning"
    AFTERNOON = "Afternoon"


def coerce_day_slot(value: Any, default: DaySlot) -> Any:
    """Map missing or loosely written slot values onto a DaySlot."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    if isinstance(value, str):
        return _SLOT_ALIASES.get(value.strip().lower(), value)
    return value


def coerce_size(value: Any) -> Optional[str]:
    """Sizes are stored as labels ("M") or numbers (36); compare them as text."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class LineItem(BaseModel):
    """One outfit (and size) on a rental order."""

    outfit_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("outfit_id", "outfitId", "id")
    )
    design_code: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("design_code", "designCode")
    )
    design_name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("design_name", "designName")
    )
    size: Optional[str] = None
    rental_price: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("rental_price", "rentalPrice")
    )

    @field_validator("size", mode="before")
    @classmethod
    def _normalize_size(cls, value: Any) -> Optional[str]:
        return coerce_size(value)

    def matches(self, outfit_id: Optional[str], design_code: Optional[str] = None) -> bool:
        """True if this item refers to the outfit by id or by design code.

        Call sites disagree on which identifier a caller passes, so either
        key is accepted against either field.
        """
        keys = {key for key in (outfit_id, design_code) if key}
        return bool(keys) and (self.outfit_id in keys or self.design_code in keys)


class Booking(BaseModel):
    """A rental order. Read-only input to the availability engine."""

    id: str
    studio_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("studio_id", "studioId")
    )
    customer_name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("customer_name", "customerName")
    )
    status: str = ""
    start_date: Optional[date] = Field(
        default=None, validation_alias=AliasChoices("start_date", "startDate")
    )
    end_date: Optional[date] = Field(
        default=None, validation_alias=AliasChoices("end_date", "endDate")
    )
    delivery_date: Optional[date] = Field(
        default=None, validation_alias=AliasChoices("delivery_date", "deliveryDate")
    )
    pickup_slot: DaySlot = Field(
        default=DaySlot.MORNING, validation_alias=AliasChoices("pickup_slot", "pickupSlot")
    )
    return_slot: DaySlot = Field(
        default=DaySlot.AFTERNOON, validation_alias=AliasChoices("return_slot", "returnSlot")
    )
    items: list[LineItem] = Field(
        default_factory=list, validation_alias=AliasChoices("items", "outfitItems")
    )

    @field_validator("start_date", "end_date", "delivery_date", mode="before")
    @classmethod
    def _coerce_dates(cls, value: Any) -> Optional[date]:
        return coerce_date(value)

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> str:
        return normalize_status(value)

    @field_validator("pickup_slot", mode="before")
    @classmethod
    def _default_pickup(cls, value: Any) -> Any:
        return coerce_day_slot(value, DaySlot.MORNING)

    @field_validator("return_slot", mode="before")
    @classmethod
    def _default_return(cls, value: Any) -> Any:
        return coerce_day_slot(value, DaySlot.AFTERNOON)

    @field_validator("items", mode="before")
    @classmethod
    def _default_items(cls, value: Any) -> Any:
        return value or []

    @property
    def is_cancelled(self) -> bool:
        return self.status in CANCELLED_STATUSES

    def rental_window(self) -> Optional[tuple[date, date]]:
        """Return (first day, last day) of the rental, or None if unusable.

        Range-based orders use start/end; legacy orders fall back to their
        single delivery date. A range that ends before it starts is unusable.
        """
        if self.start_date is not None and self.end_date is not None:
            if self.end_date < self.start_date:
                return None
            return self.start_date, self.end_date
        if self.delivery_date is not None:
            return self.delivery_date, self.delivery_date
        return None

    def items_for(
        self, outfit_id: Optional[str], design_code: Optional[str] = None
    ) -> list[LineItem]:
        """Line items on this order that refer to the given outfit."""
        return [item for item in self.items if item.matches(outfit_id, design_code)]
