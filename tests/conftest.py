"""Shared test fixtures and helpers."""

from datetime import date
from typing import Optional

import pytest

from outfit_rental.schemas.booking_schema import Booking, DaySlot, LineItem
from outfit_rental.schemas.outfit_schema import Outfit
from outfit_rental.tools.catalog import OutfitCatalog
from outfit_rental.tools.order_store import OrderStore

MON = date(2025, 3, 10)
TUE = date(2025, 3, 11)
WED = date(2025, 3, 12)
THU = date(2025, 3, 13)
FRI = date(2025, 3, 14)
SAT = date(2025, 3, 15)
SUN = date(2025, 3, 16)

STUDIO = "studio-test"


@pytest.fixture
def red_gown() -> Outfit:
    return Outfit(
        id="outfit-red-gown",
        code="RG-01",
        name="Red Gown",
        sizes=["M"],
        size_quantities={"M": 2},
    )


@pytest.fixture
def three_size_outfit() -> Outfit:
    return Outfit(
        id="outfit-blue-saree",
        code="BS-03",
        name="Blue Saree",
        sizes=["S", "M", "L"],
        size_quantities={"S": 1, "M": 1, "L": 1},
    )


@pytest.fixture
def two_size_outfit() -> Outfit:
    return Outfit(
        id="outfit-ivory-lehenga",
        code="IL-07",
        name="Ivory Lehenga",
        sizes=["S", "M"],
        size_quantities={"S": 1, "M": 1},
    )


@pytest.fixture
def order_store() -> OrderStore:
    return OrderStore()


@pytest.fixture
def catalog(red_gown, three_size_outfit, two_size_outfit) -> OutfitCatalog:
    return OutfitCatalog([red_gown, three_size_outfit, two_size_outfit])


def make_booking(
    booking_id: str = "ORD-1",
    start: Optional[date] = MON,
    end: Optional[date] = WED,
    sizes: Optional[list[Optional[str]]] = None,
    outfit_id: Optional[str] = "outfit-red-gown",
    design_code: Optional[str] = None,
    pickup: DaySlot = DaySlot.MORNING,
    ret: DaySlot = DaySlot.AFTERNOON,
    status: str = "confirmed",
    studio_id: str = STUDIO,
    delivery_date: Optional[date] = None,
) -> Booking:
    """Helper to create a Booking with one line item per size."""
    if sizes is None:
        sizes = ["M"]
    return Booking(
        id=booking_id,
        studio_id=studio_id,
        customer_name="Test Customer",
        status=status,
        start_date=start,
        end_date=end,
        delivery_date=delivery_date,
        pickup_slot=pickup,
        return_slot=ret,
        items=[
            LineItem(outfit_id=outfit_id, design_code=design_code, size=size)
            for size in sizes
        ],
    )
