from enum import Enum


class VehicleType(str, Enum):
    CAR = "car"
    BIKE = "bike"


class BookingStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class BillingMode(str, Enum):
    PER_MINUTE = "per_minute"
    PER_HOUR_BLOCK = "per_hour_block"


class BusinessStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    BANNED = "banned"


class PaymentMethod(str, Enum):
    CASH = "cash"
    ONLINE = "online"
