"""
Offline console demo: availability checks against a seeded studio.

Uses the real availability engine, calendar classification, order store
and catalog with an in-memory sample studio. No database, no network.
Designed for live demo walkthroughs.

Usage:
    python console_demo.py
    python console_demo.py --scenario overlap
    python console_demo.py --scenario calendar
"""

import argparse
from datetime import date, timedelta
from typing import Optional

from outfit_rental.config import settings
from outfit_rental.engine.availability import check_availability
from outfit_rental.engine.calendar_view import build_calendar
from outfit_rental.errors import AvailabilityError
from outfit_rental.logging_context import set_studio_id
from outfit_rental.schemas.availability_schema import (
    AvailabilityRequest,
    AvailabilityResult,
    DayStatus,
)
from outfit_rental.schemas.booking_schema import Booking, DaySlot, LineItem
from outfit_rental.schemas.outfit_schema import Outfit
from outfit_rental.tools.catalog import OutfitCatalog
from outfit_rental.tools.order_builder import DraftItem, check_draft_order
from outfit_rental.tools.order_store import OrderStore

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

STATUS_COLOURS: dict[DayStatus, str] = {
    DayStatus.FREE: GREEN,
    DayStatus.BOOKED: YELLOW,
    DayStatus.WARNING: YELLOW + BOLD,
    DayStatus.SOLD_OUT: RED,
}

STATUS_MARKS: dict[DayStatus, str] = {
    DayStatus.FREE: ".",
    DayStatus.BOOKED: "o",
    DayStatus.WARNING: "!",
    DayStatus.SOLD_OUT: "X",
}

# Sample week starts on a Monday so scenario dates read naturally
SAMPLE_MONDAY = date(2025, 3, 10)


def _day(offset: int) -> date:
    return SAMPLE_MONDAY + timedelta(days=offset)


class ConsoleDemo:
    """Seeds a sample studio and prints availability verdicts in the terminal."""

    def __init__(self) -> None:
        self.studio_id = settings.studio.default_studio_id
        set_studio_id(self.studio_id)
        self.catalog = OutfitCatalog()
        self.orders = OrderStore()
        self._seed()

    def _seed(self) -> None:
        self.catalog.add(Outfit(
            id="outfit-red-gown", code="RG-01", name="Red Gown",
            sizes=["S", "M", "L"], size_quantities={"S": 1, "M": 2, "L": 1},
            rental_price=2500,
        ))
        self.catalog.add(Outfit(
            id="outfit-ivory-lehenga", code="IL-07", name="Ivory Lehenga",
            sizes=["36", "38"], size_quantities={"36": 1, "38": 1},
            rental_price=4200,
        ))
        self.orders.add(Booking(
            id="ORD-A", studio_id=self.studio_id, customer_name="Asha",
            status="confirmed", start_date=_day(0), end_date=_day(2),
            items=[LineItem(outfit_id="outfit-red-gown", design_code="RG-01", size="M")],
        ))
        self.orders.add(Booking(
            id="ORD-B", studio_id=self.studio_id, customer_name="Bela",
            status="pending", start_date=_day(2), end_date=_day(2),
            items=[LineItem(design_code="RG-01", size="M")],
        ))
        self.orders.add(Booking(
            id="ORD-C", studio_id=self.studio_id, customer_name="Chitra",
            status="confirmed", start_date=_day(1), end_date=_day(4),
            pickup_slot=DaySlot.AFTERNOON, return_slot=DaySlot.MORNING,
            items=[LineItem(outfit_id="outfit-ivory-lehenga", size="36")],
        ))
        self.orders.add(Booking(
            id="ORD-D", studio_id=self.studio_id, customer_name="Devi",
            status="cancelled", start_date=_day(0), end_date=_day(6),
            items=[LineItem(outfit_id="outfit-ivory-lehenga", size="38")],
        ))

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def print_verdict(self, label: str, result: AvailabilityResult) -> None:
        colour = GREEN if result.available else RED
        badge = "AVAILABLE" if result.available else "BLOCKED"
        print(f"{BOLD}{label}{RESET}: {colour}{badge}{RESET} - {result.reason}")
        self.system_log(
            f"size={result.size} stock={result.total_stock} peak={result.peak_usage} "
            f"remaining={result.available_quantity} orders={result.blocking_bookings}"
        )

    def check(
        self,
        outfit_key: str,
        start: date,
        end: date,
        size: Optional[str] = None,
        buffer_days: Optional[int] = None,
    ) -> Optional[AvailabilityResult]:
        outfit = self.catalog.get(outfit_key)
        if outfit is None:
            print(f"{RED}Unknown outfit: {outfit_key}{RESET}")
            return None
        extra = {} if buffer_days is None else {"buffer_days": buffer_days}
        request = AvailabilityRequest.for_outfit(outfit, start, end, size=size, **extra)
        try:
            result = check_availability(self.orders.for_studio(self.studio_id), request)
        except AvailabilityError as exc:
            print(f"{RED}Invalid request: {exc}{RESET}")
            return None
        label = f"{outfit.name} size {size or 'any'} {start.isoformat()}..{end.isoformat()}"
        self.print_verdict(label, result)
        return result

    def print_calendar(self, outfit_key: str, start: date, days: int = 14) -> None:
        outfit = self.catalog.get(outfit_key)
        if outfit is None:
            print(f"{RED}Unknown outfit: {outfit_key}{RESET}")
            return
        cells = build_calendar(
            self.orders.for_studio(self.studio_id), outfit, start, start + timedelta(days=days - 1)
        )
        print(f"{BOLD}{outfit.name} ({', '.join(outfit.all_sizes)}){RESET}")
        for cell in cells:
            am = f"{STATUS_COLOURS[cell.am]}{STATUS_MARKS[cell.am]}{RESET}"
            pm = f"{STATUS_COLOURS[cell.pm]}{STATUS_MARKS[cell.pm]}{RESET}"
            detail = ""
            if cell.exhausted_sizes:
                detail = f" exhausted: {', '.join(cell.exhausted_sizes)}"
            print(
                f"  {cell.day.strftime('%a %d %b')}  AM {am}  PM {pm}  "
                f"{cell.status.value:<8}{DIM}{detail}{RESET}"
            )

    # ------------------------------------------------------------------ #
    # Scenarios
    # ------------------------------------------------------------------ #

    def scenario_overlap(self) -> None:
        self.system_log("ORD-A holds M Mon-Wed, ORD-B holds M all of Wed, stock M=2")
        self.check("RG-01", _day(0), _day(2), size="M")
        self.check("RG-01", _day(3), _day(4), size="M")

    def scenario_buffer(self) -> None:
        self.system_log("Two cleaning days after every return")
        self.check("RG-01", _day(3), _day(3), size="M", buffer_days=0)
        self.check("IL-07", _day(5), _day(5), size="36", buffer_days=2)

    def scenario_any_size(self) -> None:
        self.system_log("ORD-C holds 36; cancelled ORD-D does not hold 38")
        self.check("IL-07", _day(2), _day(3))
        self.check("IL-07", _day(2), _day(3), size="36")

    def scenario_calendar(self) -> None:
        self.print_calendar("RG-01", SAMPLE_MONDAY, days=7)
        print()
        self.print_calendar("IL-07", SAMPLE_MONDAY, days=7)

    def scenario_draft(self) -> None:
        check = check_draft_order(
            self.catalog,
            self.orders.for_studio(self.studio_id),
            [DraftItem("RG-01", "M"), DraftItem("IL-07", "38"), DraftItem("XX-99", "S")],
            _day(2),
            _day(3),
        )
        for row in check.rows:
            if row.error:
                print(f"  {row.item.outfit_key}: {RED}{row.error}{RESET}")
            elif row.result is not None:
                colour = GREEN if row.result.available else RED
                print(f"  {row.item.outfit_key} {row.item.size}: {colour}{row.result.reason}{RESET}")
        self.system_log(f"Rental days: {check.rental_days}, conflicts: {check.has_conflicts}")

    SCENARIOS = ("overlap", "buffer", "any-size", "calendar", "draft")

    def run_scenario(self, scenario: str) -> None:
        """Auto-play a pre-scripted scenario for demo purposes."""
        handler = getattr(self, f"scenario_{scenario.replace('-', '_')}", None)
        if scenario not in self.SCENARIOS or handler is None:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return

        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  OUTFIT AVAILABILITY - Scenario: {scenario}{RESET}")
        print(f"{BOLD}  Studio: {settings.studio.name}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")
        print()
        handler()
        print(f"\n{BOLD}{'=' * 60}{RESET}")

    def run(self) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  OUTFIT AVAILABILITY - Console Demo{RESET}")
        print(f"{BOLD}  Studio: {settings.studio.name}{RESET}")
        print(f"{BOLD}  Enter: <design code> <start YYYY-MM-DD> <end YYYY-MM-DD> [size]{RESET}")
        print(f"{BOLD}  Type 'quit' to exit{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

        while True:
            user_input = input(f"\n{BLUE}[Check] {RESET}").strip()
            if not user_input:
                continue
            if user_input.lower() in ("quit", "exit", "q"):
                print(f"\n{DIM}Session ended.{RESET}")
                return
            parts = user_input.split()
            if len(parts) not in (3, 4):
                print(f"{YELLOW}Expected: <design code> <start> <end> [size]{RESET}")
                continue
            try:
                start, end = date.fromisoformat(parts[1]), date.fromisoformat(parts[2])
            except ValueError:
                print(f"{YELLOW}Dates must look like 2025-03-10{RESET}")
                continue
            self.check(parts[0], start, end, size=parts[3] if len(parts) == 4 else None)


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline console demo")
    parser.add_argument(
        "--scenario",
        choices=list(ConsoleDemo.SCENARIOS),
        default=None,
        help="Auto-play a pre-scripted scenario instead of interactive mode",
    )
    args = parser.parse_args()

    demo = ConsoleDemo()
    if args.scenario:
        demo.run_scenario(args.scenario)
    else:
        demo.run()


if __name__ == "__main__":
    main()
