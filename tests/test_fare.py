import pytest
from datetime import datetime, timedelta, timezone

from parkflow.domain.common import BillingMode
from parkflow.domain.exceptions import InvalidInterval, InvalidPricing
from parkflow.domain.fare import format_duration, quote_fare, validate_pricing

ENTRY = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


def quote(elapsed, price=60.0, max_hours=3.0, fine=500.0, mode=BillingMode.PER_MINUTE):
    return quote_fare(ENTRY, ENTRY + elapsed, price, max_hours, fine, mode)


class TestPerMinuteBilling:
    def test_zero_duration_costs_nothing(self):
        result = quote(timedelta(0))
        assert result.duration_minutes == 0
        assert result.base_cost == 0
        assert result.total_cost == 0
        assert result.exceeded is False

    def test_charges_each_full_minute(self):
        result = quote(timedelta(minutes=90), price=60.0)
        assert result.duration_minutes == 90
        assert result.base_cost == pytest.approx(90.0)
        assert result.fine_applied == 0
        assert result.total_cost == pytest.approx(90.0)

    def test_partial_minute_is_floored(self):
        result = quote(timedelta(minutes=10, seconds=59), price=60.0)
        assert result.duration_minutes == 10
        assert result.base_cost == pytest.approx(10.0)

    def test_duration_hours_is_not_rounded(self):
        result = quote(timedelta(minutes=45))
        assert result.duration_hours == pytest.approx(0.75)

    def test_display_total_rounds_to_two_decimals(self):
        result = quote(timedelta(minutes=7), price=50.0)
        assert result.total_cost == pytest.approx(7 * 50.0 / 60)
        assert result.display_total == 5.83


class TestHourBlockBilling:
    def test_started_hour_is_charged_in_full(self):
        result = quote(timedelta(minutes=61), price=60.0, mode=BillingMode.PER_HOUR_BLOCK)
        assert result.base_cost == 120.0

    def test_exact_hours_are_not_rounded_up(self):
        result = quote(timedelta(hours=2), price=60.0, mode=BillingMode.PER_HOUR_BLOCK)
        assert result.base_cost == 120.0

    def test_zero_duration_is_zero_blocks(self):
        result = quote(timedelta(0), mode=BillingMode.PER_HOUR_BLOCK)
        assert result.base_cost == 0

    def test_61_minutes_at_100_per_hour(self):
        result = quote(timedelta(minutes=61), price=100.0, max_hours=1.0, fine=0.0, mode=BillingMode.PER_HOUR_BLOCK)
        assert result.base_cost == 200.0
        assert result.exceeded is True

    def test_morning_stay_under_maximum(self):
        result = quote_fare(
            datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc),
            datetime(2024, 3, 1, 11, 30, tzinfo=timezone.utc),
            50.0, 4.0, 100.0, BillingMode.PER_HOUR_BLOCK,
        )
        assert result.duration_minutes == 150
        assert result.base_cost == 150.0
        assert result.exceeded is False
        assert result.fine_applied == 0
        assert result.total_cost == 150.0
        assert result.display_total == 150.00

    def test_accepts_mode_as_string(self):
        result = quote(timedelta(minutes=1), price=60.0, mode="per_hour_block")
        assert result.billing_mode == BillingMode.PER_HOUR_BLOCK
        assert result.base_cost == 60.0


class TestOverstayFine:
    def test_stay_equal_to_maximum_is_not_fined(self):
        result = quote(timedelta(hours=3), max_hours=3.0, fine=500.0)
        assert result.exceeded is False
        assert result.fine_applied == 0

    def test_one_second_over_maximum_is_fined(self):
        result = quote(timedelta(hours=3, seconds=1), price=60.0, max_hours=3.0, fine=500.0)
        assert result.exceeded is True
        assert result.fine_applied == 500.0
        assert result.total_cost == pytest.approx(180.0 + 500.0)

    def test_fine_is_flat_regardless_of_overstay_length(self):
        short = quote(timedelta(hours=4), fine=500.0)
        long = quote(timedelta(hours=30), fine=500.0)
        assert short.fine_applied == long.fine_applied == 500.0

    def test_fine_added_in_hour_block_mode(self):
        result = quote(timedelta(hours=3, minutes=1), price=10.0, max_hours=3.0, fine=100.0,
                       mode=BillingMode.PER_HOUR_BLOCK)
        assert result.base_cost == 40.0
        assert result.total_cost == 140.0

    def test_hour_block_stay_equal_to_maximum_is_not_fined(self):
        result = quote(timedelta(hours=3), price=10.0, max_hours=3.0, fine=100.0, mode=BillingMode.PER_HOUR_BLOCK)
        assert result.exceeded is False
        assert result.total_cost == result.base_cost == 30.0

    def test_hour_block_total_is_base_plus_fine_just_over_maximum(self):
        result = quote(timedelta(hours=3, seconds=1), price=10.0, max_hours=3.0, fine=100.0,
                       mode=BillingMode.PER_HOUR_BLOCK)
        assert result.exceeded is True
        assert result.base_cost == 40.0
        assert result.total_cost == result.base_cost + result.fine_applied == 140.0

    def test_zero_fine_still_reports_exceeded(self):
        result = quote(timedelta(hours=5), max_hours=3.0, fine=0.0)
        assert result.exceeded is True
        assert result.fine_applied == 0


class TestValidation:
    def test_exit_before_entry_is_rejected(self):
        with pytest.raises(InvalidInterval):
            quote_fare(ENTRY, ENTRY - timedelta(minutes=1), 60.0, 3.0, 500.0)

    def test_invalid_interval_is_a_value_error(self):
        with pytest.raises(ValueError, match="before entry time"):
            quote_fare(ENTRY, ENTRY - timedelta(seconds=1), 60.0, 3.0, 500.0)

    @pytest.mark.parametrize("price, max_hours, fine", [
        (-1.0, 3.0, 0.0),
        (10.0, 0.0, 0.0),
        (10.0, -2.0, 0.0),
        (10.0, 3.0, -5.0),
        (None, 3.0, 0.0),
    ])
    def test_invalid_pricing(self, price, max_hours, fine):
        with pytest.raises(InvalidPricing):
            validate_pricing(price, max_hours, fine)

    def test_quote_validates_pricing(self):
        with pytest.raises(InvalidPricing):
            quote_fare(ENTRY, ENTRY + timedelta(hours=1), 60.0, 0, 0)

    def test_free_parking_is_valid(self):
        result = quote(timedelta(hours=2), price=0.0, fine=0.0)
        assert result.total_cost == 0

    def test_naive_datetimes_are_treated_as_utc(self):
        naive_entry = datetime(2024, 3, 1, 9, 0)
        aware_exit = datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)
        result = quote_fare(naive_entry, aware_exit, 60.0, 3.0, 0.0)
        assert result.duration_minutes == 60


def test_fare_is_monotonic_in_duration():
    totals = [quote(timedelta(minutes=m), price=45.0).total_cost for m in range(0, 400, 7)]
    assert totals == sorted(totals)


def test_quote_to_dict():
    data = quote(timedelta(minutes=30), price=60.0).to_dict()
    assert data["duration_minutes"] == 30
    assert data["display_total"] == 30.0
    assert data["exceeded"] is False
    assert data["billing_mode"] == BillingMode.PER_MINUTE


@pytest.mark.parametrize("minutes, expected", [
    (0, "0h 0m"),
    (59, "0h 59m"),
    (60, "1h 0m"),
    (135, "2h 15m"),
])
def test_format_duration(minutes, expected):
    assert format_duration(minutes) == expected
