from outfit_rental.engine.availability import check_availability
from outfit_rental.engine.calendar_view import (
    build_calendar,
    calendar_months,
    classify_day,
    classify_half,
    month_calendar,
)
from outfit_rental.engine.occupancy import OccupancyLedger, build_occupancy
from outfit_rental.engine.slots import HalfDay, Slot, expand_slots, iter_days

__all__ = [
    "check_availability",
    "expand_slots",
    "iter_days",
    "HalfDay",
    "Slot",
    "OccupancyLedger",
    "build_occupancy",
    "build_calendar",
    "calendar_months",
    "classify_day",
    "classify_half",
    "month_calendar",
]
