"""Fare calculation for a single parking stay.

Two billing modes are supported because lots bill either continuously or in
whole-hour blocks:

* ``per_minute``: every started minute is floored away, the rest is charged
  at ``price_per_hour / 60`` per minute.
* ``per_hour_block``: every started hour is charged in full.

In both modes a flat fine is added once the stay is strictly longer than the
lot's maximum duration.
"""
import math
from datetime import datetime, timedelta, timezone

from parkflow.domain.common import BillingMode
from parkflow.domain.entities import FareQuote
from parkflow.domain.exceptions import InvalidInterval, InvalidPricing


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def validate_pricing(price_per_hour: float, max_duration_hours: float, fine_amount: float):
    if price_per_hour is None or price_per_hour < 0:
        raise InvalidPricing(f"Price per hour must be non-negative, got {price_per_hour}")
    if max_duration_hours is None or max_duration_hours <= 0:
        raise InvalidPricing(f"Maximum duration must be positive, got {max_duration_hours}")
    if fine_amount is None or fine_amount < 0:
        raise InvalidPricing(f"Fine amount must be non-negative, got {fine_amount}")


def quote_fare(
    entry_time: datetime,
    exit_time: datetime,
    price_per_hour: float,
    max_duration_hours: float,
    fine_amount: float,
    billing_mode: BillingMode = BillingMode.PER_MINUTE,
) -> FareQuote:
    validate_pricing(price_per_hour, max_duration_hours, fine_amount)

    entry_time = _as_utc(entry_time)
    exit_time = _as_utc(exit_time)
    if exit_time < entry_time:
        raise InvalidInterval(entry_time, exit_time)

    elapsed = exit_time - entry_time
    duration_minutes = elapsed // timedelta(minutes=1)
    duration_hours = elapsed.total_seconds() / 3600

    billing_mode = BillingMode(billing_mode)
    if billing_mode == BillingMode.PER_HOUR_BLOCK:
        base_cost = math.ceil(duration_hours) * price_per_hour
    else:
        base_cost = duration_minutes * (price_per_hour / 60)

    exceeded = duration_hours > max_duration_hours
    fine_applied = fine_amount if exceeded else 0.0

    return FareQuote(
        duration_minutes=duration_minutes,
        duration_hours=duration_hours,
        base_cost=base_cost,
        exceeded=exceeded,
        fine_applied=fine_applied,
        total_cost=base_cost + fine_applied,
        billing_mode=billing_mode,
    )


def format_duration(duration_minutes: int) -> str:
    hours, minutes = divmod(duration_minutes, 60)
    return f"{hours}h {minutes}m"
