"""Errors raised by the Parkflow core.

Everything except ``UpstreamUnavailable`` is deterministic: it reports a bad
input or an illegal state transition and retrying will not help.
"""
from typing import Optional


class ParkflowError(Exception):
    pass


class InvalidInterval(ParkflowError, ValueError):
    def __init__(self, entry_time, exit_time):
        self.entry_time = entry_time
        self.exit_time = exit_time
        super().__init__(f"Exit time {exit_time} is before entry time {entry_time}")


class InvalidPricing(ParkflowError, ValueError):
    pass


class DuplicateActiveBooking(ParkflowError, ValueError):
    def __init__(self, parking_id: int, vehicle_number: str):
        self.parking_id = parking_id
        self.vehicle_number = vehicle_number
        super().__init__(f"Vehicle {vehicle_number} is already parked at lot {parking_id}")


class AlreadyCompleted(ParkflowError, ValueError):
    def __init__(self, booking_id: Optional[int]):
        self.booking_id = booking_id
        super().__init__(f"Booking {booking_id} is already completed")


class LotNotFound(ParkflowError, LookupError):
    def __init__(self, lot_id):
        self.lot_id = lot_id
        super().__init__(f"Parking lot {lot_id} not found")


class BookingNotFound(ParkflowError, LookupError):
    def __init__(self, booking_id):
        self.booking_id = booking_id
        super().__init__(f"Booking {booking_id} not found")


class AccountNotFound(ParkflowError, LookupError):
    def __init__(self, account_id):
        self.account_id = account_id
        super().__init__(f"Business account {account_id} not found")


class BusinessNotApproved(ParkflowError, PermissionError):
    MESSAGES = {
        "pending": "Your business account is pending admin approval.",
        "rejected": "Your business account has been rejected. Please contact support.",
        "banned": "Your business account has been banned. Please contact support.",
    }

    def __init__(self, status: str):
        self.status = status
        super().__init__(self.MESSAGES.get(status, f"Business account status is {status}"))


class UpstreamUnavailable(ParkflowError):
    """The data store or the geocoder failed; the caller may try again."""


class InvalidCapacity(ParkflowError, ValueError):
    pass
