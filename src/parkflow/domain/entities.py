from datetime import datetime
from typing import Optional

from parkflow.domain.common import (
    BillingMode,
    BookingStatus,
    BusinessStatus,
    PaymentMethod,
    VehicleType,
)


class BusinessAccount:
    def __init__(
        self,
        user_id: str,
        business_name: str,
        status: BusinessStatus = BusinessStatus.PENDING,
        license_id: Optional[str] = None,
        full_name: Optional[str] = None,
        email: Optional[str] = None,
        proof_doc_url: Optional[str] = None,
        id: Optional[int] = None,
        created_at: Optional[datetime] = None,
    ):
        self.id = id
        self.user_id = user_id
        self.business_name = business_name
        self.status = status
        self.license_id = license_id
        self.full_name = full_name
        self.email = email
        self.proof_doc_url = proof_doc_url
        self.created_at = created_at

    @property
    def is_approved(self) -> bool:
        return self.status == BusinessStatus.APPROVED


class ParkingLot:
    def __init__(
        self,
        owner_id: int,
        name: str,
        price_per_hour: float,
        max_duration_hours: float,
        fine_amount: float,
        total_slots_car: int = 0,
        total_slots_bike: int = 0,
        available_slots_car: Optional[int] = None,
        available_slots_bike: Optional[int] = None,
        address: Optional[str] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        billing_mode: BillingMode = BillingMode.PER_MINUTE,
        is_available: bool = True,
        id: Optional[int] = None,
    ):
        self.id = id
        self.owner_id = owner_id
        self.name = name
        self.address = address
        self.latitude = latitude
        self.longitude = longitude
        self.price_per_hour = price_per_hour
        self.max_duration_hours = max_duration_hours
        self.fine_amount = fine_amount
        self.billing_mode = billing_mode
        self.total_slots_car = total_slots_car
        self.total_slots_bike = total_slots_bike
        self.available_slots_car = total_slots_car if available_slots_car is None else available_slots_car
        self.available_slots_bike = total_slots_bike if available_slots_bike is None else available_slots_bike
        self.is_available = is_available

    @property
    def has_position(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def total_slots(self, vehicle_type: VehicleType) -> int:
        if vehicle_type == VehicleType.BIKE:
            return self.total_slots_bike
        return self.total_slots_car

    def set_available_slots(self, vehicle_type: VehicleType, available: int):
        # Clamp so that 0 <= available <= total always holds
        available = max(0, min(available, self.total_slots(vehicle_type)))
        if vehicle_type == VehicleType.BIKE:
            self.available_slots_bike = available
        else:
            self.available_slots_car = available


class Booking:
    def __init__(
        self,
        parking_id: int,
        vehicle_number: str,
        vehicle_type: VehicleType,
        entry_time: datetime,
        status: BookingStatus = BookingStatus.ACTIVE,
        owner_name: Optional[str] = None,
        exit_time: Optional[datetime] = None,
        total_amount: Optional[float] = None,
        payment_method: Optional[PaymentMethod] = None,
        id: Optional[int] = None,
    ):
        self.id = id
        self.parking_id = parking_id
        self.vehicle_number = vehicle_number.strip().upper()
        self.vehicle_type = vehicle_type
        self.owner_name = owner_name
        self.entry_time = entry_time
        self.exit_time = exit_time
        self.status = status
        self.total_amount = total_amount
        self.payment_method = payment_method

    @property
    def is_active(self) -> bool:
        return self.status == BookingStatus.ACTIVE


class FareQuote:
    """Bill for one stay. Derived on demand, never persisted."""

    def __init__(
        self,
        duration_minutes: int,
        duration_hours: float,
        base_cost: float,
        exceeded: bool,
        fine_applied: float,
        total_cost: float,
        billing_mode: BillingMode,
    ):
        self.duration_minutes = duration_minutes
        self.duration_hours = duration_hours
        self.base_cost = base_cost
        self.exceeded = exceeded
        self.fine_applied = fine_applied
        self.total_cost = total_cost
        self.billing_mode = billing_mode

    @property
    def display_total(self) -> float:
        return round(self.total_cost, 2)

    def to_dict(self):
        return {
            "duration_minutes": self.duration_minutes,
            "duration_hours": self.duration_hours,
            "base_cost": self.base_cost,
            "exceeded": self.exceeded,
            "fine_applied": self.fine_applied,
            "total_cost": self.total_cost,
            "display_total": self.display_total,
            "billing_mode": self.billing_mode,
        }
