"""
Command-line entry point.

Runs the offline demo, or checks availability against an order export
(a JSON list of order documents, camelCase or snake_case keys).

Usage:
    Demo:   python main.py demo [--scenario overlap]
    Check:  python main.py check --orders orders.json --outfit RG-01 \
                --sizes S=1,M=2,L=1 --size M --start 2025-03-10 --end 2025-03-12
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from outfit_rental.config import settings
from outfit_rental.engine.availability import check_availability
from outfit_rental.errors import AvailabilityError
from outfit_rental.schemas.availability_schema import AvailabilityRequest
from outfit_rental.schemas.booking_schema import Booking
from outfit_rental.tools.order_store import OrderStore

logger = logging.getLogger(__name__)

EXIT_AVAILABLE = 0
EXIT_UNAVAILABLE = 1
EXIT_INVALID = 2


def _parse_sizes(raw: str) -> dict[str, int]:
    """Parse ``"S=1,M=2,L"`` into a size -> quantity map (bare sizes get 0, i.e. default)."""
    quantities: dict[str, int] = {}
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        size, _, quantity = part.partition("=")
        try:
            quantities[size.strip()] = int(quantity) if quantity else 0
        except ValueError:
            raise argparse.ArgumentTypeError(f"Invalid quantity for size {size!r}: {quantity!r}") from None
    return quantities


def _load_orders(path: Path) -> list[Booking]:
    """Read an order export; raises ValueError if it is not JSON or not a list/dict."""
    raw = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(raw, dict):
        raw = list(raw.values())
    if not isinstance(raw, list):
        raise ValueError(f"expected a JSON list or object of orders, got {type(raw).__name__}")
    orders = []
    for index, document in enumerate(raw):
        try:
            orders.append(Booking.model_validate(document))
        except ValidationError as exc:
            logger.warning("Skipping order #%d in %s: %s", index, path, exc.errors()[0]["msg"])
    return orders


def _run_check(args: argparse.Namespace) -> int:
    orders_path = Path(args.orders)
    if not orders_path.exists():
        logger.error("Orders file not found: %s", orders_path)
        return EXIT_INVALID

    try:
        orders = _load_orders(orders_path)
    except ValueError as exc:
        sys.stderr.write(f"Invalid orders file {orders_path}: {exc}\n")
        return EXIT_INVALID
    logger.info("Loaded %d order(s) from %s", len(orders), orders_path)
    if args.studio:
        orders = OrderStore(orders).for_studio(args.studio)

    try:
        request = AvailabilityRequest(
            outfit_id=args.outfit,
            design_code=args.code,
            size=args.size,
            start_date=args.start,
            end_date=args.end,
            pickup_slot=args.pickup,
            return_slot=args.return_slot,
            size_quantities=args.sizes,
            total_stock=args.stock,
            buffer_days=args.buffer if args.buffer is not None else settings.rental.buffer_days,
        )
        result = check_availability(orders, request)
    except (ValidationError, AvailabilityError) as exc:
        sys.stderr.write(f"Invalid request: {exc}\n")
        return EXIT_INVALID

    sys.stdout.write(result.model_dump_json(indent=2) + "\n")
    return EXIT_AVAILABLE if result.available else EXIT_UNAVAILABLE


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Outfit rental availability tools.")
    commands = parser.add_subparsers(dest="command", required=True)

    demo = commands.add_parser("demo", help="Run the offline console demo.")
    demo.add_argument("--scenario", default=None, help="Auto-play a pre-scripted scenario.")

    check = commands.add_parser("check", help="Check availability against an order export.")
    check.add_argument("--orders", required=True, help="Path to a JSON list of orders.")
    check.add_argument("--studio", default=None, help="Only count orders of this studio.")
    check.add_argument("--outfit", required=True, help="Outfit id (or design code).")
    check.add_argument("--code", default=None, help="Design code, if --outfit is an id.")
    check.add_argument("--sizes", type=_parse_sizes, default={}, help="Stock map, e.g. S=1,M=2.")
    check.add_argument("--size", default=None, help="Size to check; omit for any size.")
    check.add_argument("--stock", type=int, default=None, help="Units of --size; overrides its --sizes entry.")
    check.add_argument("--start", required=True, help="Pickup date (YYYY-MM-DD).")
    check.add_argument("--end", required=True, help="Return date (YYYY-MM-DD).")
    check.add_argument("--pickup", default="Morning", help="Morning or Afternoon.")
    check.add_argument("--return", dest="return_slot", default="Afternoon", help="Morning or Afternoon.")
    check.add_argument("--buffer", type=int, default=None, help="Cleaning days after each return.")
    return parser


def main(argv=None) -> int:
    args = _build_parser().parse_args(argv)
    if args.command == "demo":
        from console_demo import ConsoleDemo

        demo = ConsoleDemo()
        if args.scenario:
            demo.run_scenario(args.scenario)
        else:
            demo.run()
        return EXIT_AVAILABLE
    return _run_check(args)


if __name__ == "__main__":
    sys.exit(main())
