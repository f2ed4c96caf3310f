from pydantic import BaseModel, Field, field_validator, ConfigDict
from datetime import datetime, timezone
from typing import Optional, List
from parkflow.domain.common import (
    BillingMode,
    BookingStatus,
    BusinessStatus,
    PaymentMethod,
    VehicleType,
)


def _aware(dt: Optional[datetime]) -> Optional[datetime]:
    if dt is None:
        return dt
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


class BusinessRegistration(BaseModel):
    user_id: str = Field(..., min_length=1)
    business_name: str = Field(..., min_length=1, max_length=100)
    license_id: Optional[str] = None
    full_name: Optional[str] = None
    email: Optional[str] = None
    proof_doc_url: Optional[str] = None


class BusinessResponse(BusinessRegistration):
    id: int
    status: BusinessStatus
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class BusinessStatusUpdate(BaseModel):
    status: BusinessStatus


class BusinessStats(BaseModel):
    total: int
    pending: int
    approved: int


class LotBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    address: Optional[str] = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    price_per_hour: float = Field(default=0.0, ge=0)
    total_slots_car: int = Field(default=0, ge=0)
    total_slots_bike: int = Field(default=0, ge=0)
    fine_amount: float = Field(default=0.0, ge=0)


class LotCreate(LotBase):
    owner_id: int
    max_duration_hours: Optional[float] = Field(default=None, gt=0)
    billing_mode: Optional[BillingMode] = None


class LotSettingsUpdate(BaseModel):
    price_per_hour: Optional[float] = Field(default=None, ge=0)
    total_slots_car: Optional[int] = Field(default=None, ge=0)
    total_slots_bike: Optional[int] = Field(default=None, ge=0)
    max_duration_hours: Optional[float] = Field(default=None, gt=0)
    fine_amount: Optional[float] = Field(default=None, ge=0)
    billing_mode: Optional[BillingMode] = None
    is_available: Optional[bool] = None


class LotResponse(LotBase):
    id: int
    owner_id: int
    max_duration_hours: float
    billing_mode: BillingMode
    available_slots_car: int
    available_slots_bike: int
    is_available: bool

    model_config = ConfigDict(from_attributes=True)


class RankedLotResponse(BaseModel):
    lot: LotResponse
    distance_km: float

    model_config = ConfigDict(from_attributes=True)


class LotSearchResponse(BaseModel):
    lots: List[LotResponse]
    focus: Optional[LotResponse] = None

    model_config = ConfigDict(from_attributes=True)


class AddressResponse(BaseModel):
    latitude: float
    longitude: float
    address: Optional[str] = None


class VehicleEntry(BaseModel):
    parking_id: int
    vehicle_number: str = Field(..., min_length=1, max_length=20)
    vehicle_type: VehicleType = VehicleType.CAR
    owner_name: Optional[str] = Field(default=None, max_length=100)

    @field_validator('vehicle_number')
    def validate_vehicle_number(cls, v):  # pylint: disable=no-self-argument
        return v.upper().strip()


class CheckoutRequest(BaseModel):
    payment_method: PaymentMethod = PaymentMethod.CASH


class BookingResponse(BaseModel):
    id: int
    parking_id: int
    vehicle_number: str
    vehicle_type: VehicleType
    owner_name: Optional[str] = None
    entry_time: datetime
    exit_time: Optional[datetime] = None
    status: BookingStatus
    total_amount: Optional[float] = None
    payment_method: Optional[PaymentMethod] = None

    @field_validator('entry_time', 'exit_time')
    @classmethod
    def make_datetime_aware(cls, dt: datetime) -> datetime:
        return _aware(dt)

    model_config = ConfigDict(from_attributes=True)


class FareQuoteRequest(BaseModel):
    entry_time: datetime
    exit_time: datetime
    price_per_hour: float = Field(..., ge=0)
    max_duration_hours: float = Field(..., gt=0)
    fine_amount: float = Field(default=0.0, ge=0)
    billing_mode: BillingMode = BillingMode.PER_MINUTE


class FareQuoteResponse(BaseModel):
    duration_minutes: int
    duration_hours: float
    base_cost: float
    exceeded: bool
    fine_applied: float
    total_cost: float
    display_total: float
    billing_mode: BillingMode

    model_config = ConfigDict(from_attributes=True)


class CheckoutResponse(BaseModel):
    booking: BookingResponse
    quote: FareQuoteResponse
    duration: str
    currency: str


class OccupancyEntry(BaseModel):
    total: int
    occupied: int
    available: int


class OccupancyResponse(BaseModel):
    car: OccupancyEntry
    bike: OccupancyEntry


class VehicleRecord(BaseModel):
    id: int
    lot_name: Optional[str] = None
    owner_name: Optional[str] = None
    vehicle_number: str
    vehicle_type: VehicleType
    entry_time: datetime
    exit_time: Optional[datetime] = None
    status: BookingStatus
    total_amount: Optional[float] = None
