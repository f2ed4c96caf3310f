from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Float, Boolean, ForeignKey, Index, text
from sqlalchemy.orm import declarative_base, relationship
from parkflow.shared.custom_types import UTCDateTime, PlateNumber

Base = declarative_base()


class BusinessProfile(Base):
    __tablename__ = "business_profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, unique=True, index=True, nullable=False)
    business_name = Column(String, nullable=False)
    license_id = Column(String, nullable=True)
    full_name = Column(String, nullable=True)
    email = Column(String, nullable=True)
    proof_doc_url = Column(String, nullable=True)
    status = Column(String, default="pending", nullable=False)  # pending, approved, rejected, banned
    created_at = Column(UTCDateTime, default=lambda: datetime.now(timezone.utc))

    parking_assets = relationship("ParkingAsset", back_populates="owner")

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "business_name": self.business_name,
            "status": self.status,
        }


class ParkingAsset(Base):
    __tablename__ = "parking_assets"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("business_profiles.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    address = Column(String, nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    price_per_hour = Column(Float, default=0.0, nullable=False)
    max_duration = Column(Float, default=24.0, nullable=False)
    fine_amount = Column(Float, default=0.0, nullable=False)
    billing_mode = Column(String, default="per_minute", nullable=False)  # per_minute, per_hour_block
    total_slots_car = Column(Integer, default=0, nullable=False)
    total_slots_bike = Column(Integer, default=0, nullable=False)
    available_slots_car = Column(Integer, default=0, nullable=False)
    available_slots_bike = Column(Integer, default=0, nullable=False)
    is_available = Column(Boolean, default=True, nullable=False)

    owner = relationship("BusinessProfile", back_populates="parking_assets")
    bookings = relationship("Booking", back_populates="parking")

    def to_dict(self):
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "name": self.name,
            "address": self.address,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "price_per_hour": self.price_per_hour,
            "available_slots_car": self.available_slots_car,
            "available_slots_bike": self.available_slots_bike,
            "is_available": self.is_available,
        }


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        # At most one open booking per plate and lot, enforced by the store itself
        Index(
            "uq_bookings_active_plate",
            "parking_id",
            "vehicle_number",
            unique=True,
            sqlite_where=text("status = 'active'"),
            postgresql_where=text("status = 'active'"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    parking_id = Column(Integer, ForeignKey("parking_assets.id"), nullable=False, index=True)
    vehicle_number = Column(PlateNumber, nullable=False, index=True)
    vehicle_type = Column(String, default="car", nullable=False)  # car, bike
    owner_name = Column(String, nullable=True)
    entry_time = Column(UTCDateTime, default=lambda: datetime.now(timezone.utc), nullable=False)
    exit_time = Column(UTCDateTime, nullable=True)
    status = Column(String, default="active", nullable=False)  # active, completed
    total_amount = Column(Float, nullable=True)
    payment_method = Column(String, nullable=True)  # cash, online

    parking = relationship("ParkingAsset", back_populates="bookings")

    def to_dict(self):
        return {
            "id": self.id,
            "parking_id": self.parking_id,
            "vehicle_number": self.vehicle_number,
            "vehicle_type": self.vehicle_type,
            "owner_name": self.owner_name,
            "entry_time": self.entry_time,
            "exit_time": self.exit_time,
            "status": self.status,
            "total_amount": self.total_amount,
            "payment_method": self.payment_method,
        }
