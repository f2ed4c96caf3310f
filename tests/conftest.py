import threading

import pytest
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import NullPool
import tempfile
import os

from parkflow.application.repositories import AbstractGeocoder
from parkflow.application.services.admin_service import AdminService
from parkflow.application.services.booking_service import BookingService
from parkflow.application.services.lot_service import LotService
from parkflow.domain.common import BillingMode, BusinessStatus
from parkflow.domain.entities import BusinessAccount, ParkingLot
from parkflow.domain.exceptions import UpstreamUnavailable
from parkflow.infrastructure.persistence.change_feed import InMemoryChangeFeed
from parkflow.infrastructure.persistence.models.models import Base
from parkflow.infrastructure.persistence.sqlalchemy_repositories import (
    SQLAlchemyBookingRepository,
    SQLAlchemyBusinessAccountRepository,
    SQLAlchemyParkingLotRepository,
)


class FakeGeocoder(AbstractGeocoder):
    """Returns a canned display name, or fails when ``fail`` is set."""

    def __init__(self, display_name="New Road, Kathmandu, Bagmati Province, Nepal", fail=False):
        self.display_name = display_name
        self.fail = fail
        self.calls = []
        self.threads = []

    def reverse(self, latitude, longitude):
        self.calls.append((latitude, longitude))
        self.threads.append(threading.get_ident())
        if self.fail:
            raise UpstreamUnavailable("Reverse geocoding failed")
        return self.display_name


@pytest.fixture(scope="function")
async def test_db():
    """Create a test database for each test function."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as tmp_file:
        test_db_path = tmp_file.name

    # NullPool avoids sharing connections between event loops
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{test_db_path}",
        poolclass=NullPool,
        echo=False
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False
    )

    yield async_session_maker

    await engine.dispose()
    os.unlink(test_db_path)


@pytest.fixture
async def db_session(test_db):
    """Create a database session for a test."""
    async with test_db() as session:
        yield session
        await session.rollback()


@pytest.fixture
def change_feed():
    return InMemoryChangeFeed()


@pytest.fixture
def account_repo(db_session, change_feed):
    return SQLAlchemyBusinessAccountRepository(db_session, change_feed)


@pytest.fixture
def lot_repo(db_session, change_feed):
    return SQLAlchemyParkingLotRepository(db_session, change_feed)


@pytest.fixture
def booking_repo(db_session, change_feed):
    return SQLAlchemyBookingRepository(db_session, change_feed)


@pytest.fixture
def geocoder():
    return FakeGeocoder()


@pytest.fixture
def booking_service(lot_repo, booking_repo, account_repo):
    return BookingService(lot_repo=lot_repo, booking_repo=booking_repo, account_repo=account_repo)


@pytest.fixture
def lot_service(lot_repo, account_repo, geocoder):
    return LotService(lot_repo=lot_repo, account_repo=account_repo, geocoder=geocoder)


@pytest.fixture
def admin_service(account_repo, lot_repo, booking_repo):
    return AdminService(account_repo=account_repo, lot_repo=lot_repo, booking_repo=booking_repo)


@pytest.fixture
async def approved_business(account_repo):
    return await account_repo.add(BusinessAccount(
        user_id="user-approved",
        business_name="Thamel Parking Pvt. Ltd.",
        status=BusinessStatus.APPROVED,
        license_id="LIC-001",
        full_name="Sita Sharma",
        email="sita@example.com",
    ))


@pytest.fixture
async def pending_business(account_repo):
    return await account_repo.add(BusinessAccount(
        user_id="user-pending",
        business_name="Patan Parking",
        status=BusinessStatus.PENDING,
    ))


@pytest.fixture
async def parking_lot(lot_repo, approved_business):
    """Lot with 2 car and 3 bike slots, 60/h, 3h maximum stay and a 500 fine."""
    return await lot_repo.add(ParkingLot(
        owner_id=approved_business.id,
        name="New Road Parking",
        address="New Road, Kathmandu",
        latitude=27.7041,
        longitude=85.3077,
        price_per_hour=60.0,
        max_duration_hours=3.0,
        fine_amount=500.0,
        billing_mode=BillingMode.PER_MINUTE,
        total_slots_car=2,
        total_slots_bike=3,
    ))


@pytest.fixture
async def pending_lot(lot_repo, pending_business):
    return await lot_repo.add(ParkingLot(
        owner_id=pending_business.id,
        name="Patan Durbar Square Parking",
        price_per_hour=40.0,
        max_duration_hours=2.0,
        fine_amount=200.0,
        total_slots_car=5,
    ))
