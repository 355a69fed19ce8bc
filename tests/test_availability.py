"""Tests for the availability check."""

from datetime import date

import pytest

from outfit_rental.engine.availability import check_availability
from outfit_rental.errors import ConfigurationError, InvalidRangeError
from outfit_rental.schemas.availability_schema import (
    AvailabilityMode,
    AvailabilityRequest,
    BlockReason,
)
from outfit_rental.schemas.booking_schema import DaySlot
from outfit_rental.schemas.outfit_schema import Outfit
from tests.conftest import FRI, MON, THU, TUE, WED, make_booking

MORNING = DaySlot.MORNING
AFTERNOON = DaySlot.AFTERNOON


def request_for(outfit: Outfit, start: date, end: date, size=None, **kwargs) -> AvailabilityRequest:
    kwargs.setdefault("buffer_days", 0)
    return AvailabilityRequest.for_outfit(outfit, start, end, size=size, **kwargs)


class TestRedGownScenarios:
    def test_overlapping_pickup_and_return_fill_stock(self, red_gown):
        booking_a = make_booking("A", MON, WED, sizes=["M"])
        booking_b = make_booking("B", WED, WED, sizes=["M"])
        result = check_availability(
            [booking_a, booking_b], request_for(red_gown, MON, WED, size="M")
        )
        assert result.available is False
        assert result.peak_usage == 2
        assert result.available_quantity == 0
        assert result.total_stock == 2
        assert set(result.blocking_bookings) == {"A", "B"}
        assert result.blocking_day == WED
        assert result.blocking_slot == "2025-03-12_AM"

    def test_reason_names_blocking_day(self, red_gown):
        bookings = [make_booking("A", MON, WED), make_booking("B", WED, WED)]
        result = check_availability(bookings, request_for(red_gown, MON, WED, size="M"))
        assert result.reason == "Size M fully booked on 2025-03-12"

    def test_no_overlap_is_available_with_full_stock(self, red_gown):
        result = check_availability(
            [make_booking("A", MON, WED)], request_for(red_gown, THU, FRI, size="M")
        )
        assert result.available is True
        assert result.available_quantity == 2
        assert result.peak_usage == 0
        assert result.blocking_bookings == []
        assert result.blocking_day is None

    def test_partial_overlap_leaves_one_unit(self, red_gown):
        result = check_availability(
            [make_booking("A", MON, WED)], request_for(red_gown, TUE, THU, size="M")
        )
        assert result.available is True
        assert result.available_quantity == 1
        assert result.blocking_bookings == ["A"]

    def test_morning_return_frees_the_afternoon(self, red_gown):
        bookings = [
            make_booking("A", MON, WED, ret=MORNING),
            make_booking("B", MON, WED, ret=MORNING),
        ]
        result = check_availability(
            bookings, request_for(red_gown, WED, THU, size="M", pickup_slot=AFTERNOON)
        )
        assert result.available is True
        assert result.peak_usage == 0


class TestBufferDays:
    @pytest.mark.parametrize("day", [THU, FRI])
    def test_buffer_days_block_following_days(self, red_gown, day):
        booking = make_booking("A", MON, WED)
        result = check_availability(
            [booking], request_for(red_gown, day, day, size="M", buffer_days=2, total_stock=1)
        )
        assert result.available is False
        assert result.peak_usage == 1
        assert result.blocking_bookings == ["A"]

    def test_buffer_reduces_capacity_with_spare_stock(self, red_gown):
        result = check_availability(
            [make_booking("A", MON, WED)], request_for(red_gown, THU, THU, size="M", buffer_days=2)
        )
        assert result.available is True
        assert result.available_quantity == 1

    def test_day_after_buffer_is_free(self, red_gown):
        saturday = date(2025, 3, 15)
        result = check_availability(
            [make_booking("A", MON, WED)],
            request_for(red_gown, saturday, saturday, size="M", buffer_days=2, total_stock=1),
        )
        assert result.available is True

    def test_request_itself_gets_no_buffer(self, red_gown):
        # A booking starting the day after the request ends is not blocked
        # by any cleaning time of the request.
        result = check_availability(
            [make_booking("A", THU, FRI)],
            request_for(red_gown, MON, WED, size="M", buffer_days=2, total_stock=1),
        )
        assert result.available is True


class TestStatusFiltering:
    @pytest.mark.parametrize(
        "status",
        ["cancelled", "Cancelled", "RETURNED", "rejected", "failed", "returned_early_cancelled"],
    )
    def test_cancelled_statuses_never_occupy(self, red_gown, status):
        bookings = [make_booking(f"X{i}", MON, FRI, status=status) for i in range(3)]
        result = check_availability(bookings, request_for(red_gown, MON, FRI, size="M"))
        assert result.peak_usage == 0
        assert result.available_quantity == 2

    @pytest.mark.parametrize("status", ["pending", "confirmed", "completed", ""])
    def test_active_statuses_occupy(self, red_gown, status):
        result = check_availability(
            [make_booking("A", MON, WED, status=status)], request_for(red_gown, TUE, TUE, size="M")
        )
        assert result.peak_usage == 1


class TestSizeHandling:
    def test_other_sizes_do_not_count(self, three_size_outfit):
        booking = make_booking("A", MON, WED, sizes=["S"], outfit_id="outfit-blue-saree")
        result = check_availability([booking], request_for(three_size_outfit, MON, WED, size="M"))
        assert result.available is True
        assert result.peak_usage == 0

    def test_legacy_booking_without_sizes_occupies_every_size(self, three_size_outfit):
        legacy = make_booking("LEGACY", MON, WED, sizes=[None], outfit_id="outfit-blue-saree")
        result = check_availability([legacy], request_for(three_size_outfit, MON, WED))
        assert result.available is False
        assert {entry.size for entry in result.per_size} == {"S", "M", "L"}
        for entry in result.per_size:
            assert entry.peak_usage == 1
            assert entry.available_quantity == 0

    def test_legacy_booking_counts_in_single_size_mode(self, three_size_outfit):
        legacy = make_booking("LEGACY", MON, WED, sizes=[None], outfit_id="outfit-blue-saree")
        result = check_availability([legacy], request_for(three_size_outfit, TUE, TUE, size="L"))
        assert result.available is False

    def test_two_units_on_one_order_count_twice(self, red_gown):
        booking = make_booking("A", MON, WED, sizes=["M", "M"])
        result = check_availability([booking], request_for(red_gown, MON, MON, size="M"))
        assert result.peak_usage == 2
        assert result.available is False

    def test_missing_quantity_defaults_to_one(self):
        outfit = Outfit(id="o-1", sizes=["M", "L"], size_quantities={"M": 3})
        result = check_availability([], request_for(outfit, MON, MON, size="L"))
        assert result.total_stock == 1
        assert result.available_quantity == 1

    def test_zero_quantity_defaults_to_one(self):
        outfit = Outfit(id="o-1", sizes=["M"], size_quantities={"M": 0})
        result = check_availability([], request_for(outfit, MON, MON, size="M"))
        assert result.total_stock == 1

    def test_explicit_total_stock_wins(self, red_gown):
        result = check_availability(
            [make_booking("A", MON, WED)], request_for(red_gown, MON, MON, size="M", total_stock=5)
        )
        assert result.total_stock == 5
        assert result.available_quantity == 4

    def test_numeric_sizes_match_text_sizes(self):
        outfit = Outfit(id="o-36", sizes=[36, 38], size_quantities={"36": 1})
        booking = make_booking("A", MON, WED, sizes=["36"], outfit_id="o-36")
        result = check_availability([booking], request_for(outfit, TUE, TUE, size=36))
        assert result.available is False


class TestAvailableQuantityInvariant:
    @pytest.mark.parametrize("stock,orders", [(1, 0), (1, 1), (1, 3), (2, 1), (2, 2), (2, 5)])
    def test_quantity_is_stock_minus_peak_floored(self, red_gown, stock, orders):
        bookings = [make_booking(f"B{i}", MON, WED) for i in range(orders)]
        result = check_availability(
            bookings, request_for(red_gown, MON, WED, size="M", total_stock=stock)
        )
        assert result.available_quantity == max(0, result.total_stock - result.peak_usage)
        assert result.available_quantity >= 0
        assert result.available is (result.available_quantity > 0)
        for entry in result.per_size:
            assert entry.available_quantity == max(0, entry.total_stock - entry.peak_usage)


class TestAnySizeMode:
    def test_one_free_size_makes_outfit_available(self, two_size_outfit):
        booking = make_booking("A", MON, WED, sizes=["S"], outfit_id="outfit-ivory-lehenga")
        result = check_availability([booking], request_for(two_size_outfit, MON, WED))
        assert result.mode == AvailabilityMode.ANY
        assert result.available is True
        assert result.size == "M"
        assert "Available" in result.reason
        assert "M" in result.reason

    def test_same_range_single_size_blocked(self, two_size_outfit):
        booking = make_booking("A", MON, WED, sizes=["S"], outfit_id="outfit-ivory-lehenga")
        result = check_availability([booking], request_for(two_size_outfit, MON, WED, size="S"))
        assert result.mode == AvailabilityMode.SINGLE
        assert result.available is False

    def test_sizes_blocked_on_different_days_still_unavailable(self, two_size_outfit):
        bookings = [
            make_booking("A", MON, MON, sizes=["S"], outfit_id="outfit-ivory-lehenga"),
            make_booking("B", WED, WED, sizes=["M"], outfit_id="outfit-ivory-lehenga"),
        ]
        result = check_availability(bookings, request_for(two_size_outfit, MON, WED))
        assert result.available is False
        assert result.size == "S"
        assert result.blocking_day == MON
        assert result.reason.startswith("No size is free for the whole range")
        by_size = {entry.size: entry for entry in result.per_size}
        assert by_size["M"].blocking_day == WED

    def test_headline_prefers_most_remaining(self):
        outfit = Outfit(id="o-1", sizes=["S", "M"], size_quantities={"S": 1, "M": 3})
        result = check_availability([], request_for(outfit, MON, MON))
        assert result.size == "M"
        assert result.available_quantity == 3

    def test_headline_ties_follow_outfit_order(self, two_size_outfit):
        result = check_availability([], request_for(two_size_outfit, MON, MON))
        assert result.size == "S"


class TestBlockingReasons:
    def test_pickup_slot_occupied(self, two_size_outfit):
        booking = make_booking(
            "A", date(2025, 3, 9), MON, sizes=["S"], ret=MORNING, outfit_id="outfit-ivory-lehenga"
        )
        result = check_availability([booking], request_for(two_size_outfit, MON, WED, size="S"))
        assert result.available is False
        assert result.per_size[0].blocking_reason == BlockReason.PICKUP_SLOT_OCCUPIED
        assert result.blocking_slot == "2025-03-10_AM"
        assert "pickup slot occupied on 2025-03-10" in result.reason

    def test_return_slot_occupied(self, two_size_outfit):
        booking = make_booking(
            "A", WED, FRI, sizes=["S"], pickup=AFTERNOON, outfit_id="outfit-ivory-lehenga"
        )
        result = check_availability([booking], request_for(two_size_outfit, MON, WED, size="S"))
        assert result.per_size[0].blocking_reason == BlockReason.RETURN_SLOT_OCCUPIED
        assert result.blocking_day == WED
        assert result.blocking_slot == "2025-03-12_PM"

    def test_fully_booked(self, two_size_outfit):
        booking = make_booking("A", TUE, TUE, sizes=["S"], outfit_id="outfit-ivory-lehenga")
        result = check_availability([booking], request_for(two_size_outfit, MON, WED, size="S"))
        assert result.per_size[0].blocking_reason == BlockReason.FULLY_BOOKED
        assert result.blocking_day == TUE

    def test_first_blocking_day_reported(self, two_size_outfit):
        bookings = [
            make_booking("A", TUE, TUE, sizes=["S"], outfit_id="outfit-ivory-lehenga"),
            make_booking("B", THU, THU, sizes=["S"], outfit_id="outfit-ivory-lehenga"),
        ]
        result = check_availability(bookings, request_for(two_size_outfit, MON, FRI, size="S"))
        assert result.blocking_day == TUE


class TestBookingSelection:
    def test_other_outfits_ignored(self, red_gown):
        booking = make_booking("A", MON, WED, outfit_id="outfit-something-else")
        result = check_availability([booking], request_for(red_gown, MON, WED, size="M"))
        assert result.peak_usage == 0

    def test_match_by_design_code(self, red_gown):
        booking = make_booking("A", MON, WED, outfit_id=None, design_code="RG-01")
        result = check_availability([booking], request_for(red_gown, MON, WED, size="M"))
        assert result.peak_usage == 1

    def test_code_passed_as_outfit_id(self):
        booking = make_booking("A", MON, WED, outfit_id=None, design_code="RG-01")
        request = AvailabilityRequest(
            outfit_id="RG-01", size="M", start_date=MON, end_date=WED,
            total_stock=1, buffer_days=0,
        )
        assert check_availability([booking], request).available is False

    def test_excluded_booking_is_ignored(self, red_gown):
        bookings = [make_booking("A", MON, WED), make_booking("B", MON, WED)]
        result = check_availability(
            bookings, request_for(red_gown, MON, WED, size="M", exclude_booking_id="A")
        )
        assert result.peak_usage == 1
        assert result.blocking_bookings == ["B"]

    def test_booking_without_dates_is_skipped(self, red_gown):
        bookings = [make_booking("NODATES", None, None), make_booking("A", MON, WED)]
        result = check_availability(bookings, request_for(red_gown, MON, WED, size="M"))
        assert result.peak_usage == 1
        assert result.blocking_bookings == ["A"]

    def test_booking_with_reversed_dates_is_skipped(self, red_gown):
        result = check_availability(
            [make_booking("BAD", WED, MON)], request_for(red_gown, MON, WED, size="M")
        )
        assert result.peak_usage == 0

    def test_delivery_date_booking_occupies_that_day(self, red_gown):
        legacy = make_booking("OLD", None, None, delivery_date=TUE)
        on_day = check_availability([legacy], request_for(red_gown, TUE, TUE, size="M"))
        next_day = check_availability([legacy], request_for(red_gown, WED, WED, size="M"))
        assert on_day.peak_usage == 1
        assert next_day.peak_usage == 0

    def test_repeated_calls_return_same_verdict(self, red_gown):
        bookings = [make_booking("A", MON, WED), make_booking("B", WED, WED)]
        request = request_for(red_gown, MON, WED, size="M")
        first = check_availability(bookings, request)
        second = check_availability(bookings, request)
        assert first == second


class TestRequestValidation:
    def test_end_before_start_is_invalid_range(self, red_gown):
        with pytest.raises(InvalidRangeError):
            check_availability([], request_for(red_gown, WED, MON, size="M"))

    def test_single_day_afternoon_to_morning_is_invalid_range(self, red_gown):
        with pytest.raises(InvalidRangeError):
            check_availability(
                [], request_for(red_gown, MON, MON, size="M",
                                pickup_slot=AFTERNOON, return_slot=MORNING)
            )

    def test_unknown_size_is_configuration_error(self, red_gown):
        with pytest.raises(ConfigurationError, match="not offered"):
            check_availability([], request_for(red_gown, MON, WED, size="XXL"))

    def test_outfit_without_sizes_is_configuration_error(self):
        outfit = Outfit(id="bare")
        with pytest.raises(ConfigurationError, match="no sizes defined"):
            check_availability([], request_for(outfit, MON, WED))

    def test_single_size_without_sizes_needs_stock(self):
        request = AvailabilityRequest(
            outfit_id="bare", size="M", start_date=MON, end_date=WED, buffer_days=0
        )
        with pytest.raises(ConfigurationError):
            check_availability([], request)

    def test_single_size_with_explicit_stock_and_no_size_list(self):
        request = AvailabilityRequest(
            outfit_id="bare", size="M", start_date=MON, end_date=WED,
            total_stock=2, buffer_days=0,
        )
        assert check_availability([], request).available_quantity == 2

    def test_negative_buffer_is_configuration_error(self, red_gown):
        with pytest.raises(ConfigurationError):
            check_availability([], request_for(red_gown, MON, WED, size="M", buffer_days=-1))

    def test_negative_stock_is_configuration_error(self):
        outfit = Outfit(id="o-1", sizes=["M"], size_quantities={"M": -2})
        with pytest.raises(ConfigurationError, match="Negative stock"):
            check_availability([], request_for(outfit, MON, WED, size="M"))

    def test_invalid_range_is_not_a_configuration_error(self, red_gown):
        with pytest.raises(InvalidRangeError) as exc_info:
            check_availability([], request_for(red_gown, WED, MON, size="XXL"))
        assert not isinstance(exc_info.value, ConfigurationError)
