"""Availability request/verdict models and calendar day states."""

from datetime import date
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from outfit_rental.config import settings
from outfit_rental.schemas.booking_schema import DaySlot, coerce_day_slot, coerce_size
from outfit_rental.schemas.outfit_schema import Outfit
from outfit_rental.utils import coerce_date


class AvailabilityMode(str, Enum):
    SINGLE = "single"
    ANY = "any"


class BlockReason(str, Enum):
    """Why a day stops a size from being rented for the whole range."""

    PICKUP_SLOT_OCCUPIED = "pickup slot occupied"
    RETURN_SLOT_OCCUPIED = "return slot occupied"
    FULLY_BOOKED = "fully booked"


class DayStatus(str, Enum):
    """Calendar colour state of a day or half-day."""

    FREE = "free"
    BOOKED = "booked"
    WARNING = "warning"
    SOLD_OUT = "sold_out"


class AvailabilityRequest(BaseModel):
    """A prospective rental to check against existing orders."""

    outfit_id: str
    design_code: Optional[str] = None
    size: Optional[str] = None
    start_date: date
    end_date: date
    pickup_slot: DaySlot = DaySlot.MORNING
    return_slot: DaySlot = DaySlot.AFTERNOON
    total_stock: Optional[int] = None
    sizes: list[str] = Field(default_factory=list)
    size_quantities: dict[str, int] = Field(default_factory=dict)
    buffer_days: int = Field(default_factory=lambda: settings.rental.buffer_days)
    exclude_booking_id: Optional[str] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _coerce_dates(cls, value: Any) -> Any:
        return coerce_date(value) or value

    @field_validator("size", mode="before")
    @classmethod
    def _normalize_size(cls, value: Any) -> Optional[str]:
        return coerce_size(value)

    @field_validator("pickup_slot", mode="before")
    @classmethod
    def _default_pickup(cls, value: Any) -> Any:
        return coerce_day_slot(value, DaySlot.MORNING)

    @field_validator("return_slot", mode="before")
    @classmethod
    def _default_return(cls, value: Any) -> Any:
        return coerce_day_slot(value, DaySlot.AFTERNOON)

    @classmethod
    def for_outfit(
        cls,
        outfit: Outfit,
        start_date: date,
        end_date: date,
        size: Optional[str] = None,
        **kwargs: Any,
    ) -> "AvailabilityRequest":
        """Build a request carrying the outfit's identifiers and stock map."""
        return cls(
            outfit_id=outfit.id,
            design_code=outfit.code,
            size=size,
            start_date=start_date,
            end_date=end_date,
            sizes=outfit.sizes,
            size_quantities=outfit.size_quantities,
            **kwargs,
        )

    @property
    def mode(self) -> AvailabilityMode:
        return AvailabilityMode.ANY if self.size is None else AvailabilityMode.SINGLE

    @property
    def outfit_sizes(self) -> list[str]:
        sizes = [coerce_size(size) for size in self.sizes]
        sizes += [coerce_size(size) for size in self.size_quantities]
        return [size for size in dict.fromkeys(sizes) if size]

    def stock_for(self, size: str) -> int:
        """Units of ``size``; an explicit single-size stock wins, then the map, then 1."""
        if self.size == size and self.total_stock:
            return self.total_stock
        quantities = {coerce_size(key): value for key, value in self.size_quantities.items()}
        return quantities.get(size) or settings.rental.default_size_quantity


class SizeAvailability(BaseModel):
    """Per-size occupancy over the requested range."""

    size: str
    total_stock: int
    peak_usage: int
    available_quantity: int
    available: bool
    blocking_day: Optional[date] = None
    blocking_slot: Optional[str] = None
    blocking_reason: Optional[BlockReason] = None
    blocking_bookings: list[str] = Field(default_factory=list)


class AvailabilityResult(BaseModel):
    """Verdict for one availability request."""

    available: bool
    available_quantity: int
    total_stock: int
    peak_usage: int
    blocking_bookings: list[str] = Field(default_factory=list)
    reason: Optional[str] = None
    size: Optional[str] = None
    mode: AvailabilityMode = AvailabilityMode.SINGLE
    blocking_day: Optional[date] = None
    blocking_slot: Optional[str] = None
    per_size: list[SizeAvailability] = Field(default_factory=list)


class DayAvailability(BaseModel):
    """Calendar cell: colour state of one day and its two halves."""

    day: date
    am: DayStatus
    pm: DayStatus
    status: DayStatus
    exhausted_sizes: list[str] = Field(default_factory=list)
    booking_ids: list[str] = Field(default_factory=list)
