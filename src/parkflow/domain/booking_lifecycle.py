"""State transitions of a Booking: ``active`` -> ``completed``.

Nothing here touches storage. Checkout builds a new Booking instead of editing
the one passed in, so a failed write leaves the caller's copy untouched.
"""
from datetime import datetime, timezone
from typing import Optional, Tuple

from parkflow.domain.common import BillingMode, BookingStatus, PaymentMethod, VehicleType
from parkflow.domain.entities import Booking, FareQuote, ParkingLot
from parkflow.domain.exceptions import AlreadyCompleted, DuplicateActiveBooking
from parkflow.domain.fare import quote_fare


def open_booking(
    lot: ParkingLot,
    vehicle_number: str,
    vehicle_type: VehicleType,
    owner_name: Optional[str] = None,
    existing: Optional[Booking] = None,
    now: Optional[datetime] = None,
) -> Booking:
    plate = vehicle_number.strip().upper()
    if existing is not None and existing.is_active and existing.parking_id == lot.id \
            and existing.vehicle_number == plate:
        raise DuplicateActiveBooking(lot.id, plate)

    return Booking(
        parking_id=lot.id,
        vehicle_number=plate,
        vehicle_type=VehicleType(vehicle_type),
        owner_name=owner_name or None,
        entry_time=now or datetime.now(timezone.utc),
        status=BookingStatus.ACTIVE,
    )


def preview_checkout(booking: Booking, lot: ParkingLot, at: Optional[datetime] = None,
                     billing_mode: Optional[BillingMode] = None) -> FareQuote:
    # Uses the lot's pricing as it is now, not as it was at entry
    return quote_fare(
        booking.entry_time,
        at or datetime.now(timezone.utc),
        lot.price_per_hour,
        lot.max_duration_hours,
        lot.fine_amount,
        billing_mode or lot.billing_mode,
    )


def checkout_booking(
    booking: Booking,
    lot: ParkingLot,
    exit_time: Optional[datetime] = None,
    billing_mode: Optional[BillingMode] = None,
    payment_method: Optional[PaymentMethod] = None,
) -> Tuple[Booking, FareQuote]:
    if not booking.is_active:
        raise AlreadyCompleted(booking.id)

    exit_time = exit_time or datetime.now(timezone.utc)
    quote = preview_checkout(booking, lot, at=exit_time, billing_mode=billing_mode)

    updated = Booking(
        id=booking.id,
        parking_id=booking.parking_id,
        vehicle_number=booking.vehicle_number,
        vehicle_type=booking.vehicle_type,
        owner_name=booking.owner_name,
        entry_time=booking.entry_time,
        exit_time=exit_time,
        status=BookingStatus.COMPLETED,
        total_amount=quote.display_total,
        payment_method=payment_method,
    )
    return updated, quote
