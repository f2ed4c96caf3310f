from fastapi import Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from parkflow.application.services.admin_service import AdminService
from parkflow.application.services.booking_service import BookingService
from parkflow.application.services.lot_service import LotService
from parkflow.domain.exceptions import (
    AccountNotFound,
    AlreadyCompleted,
    BookingNotFound,
    BusinessNotApproved,
    DuplicateActiveBooking,
    InvalidCapacity,
    InvalidInterval,
    InvalidPricing,
    LotNotFound,
    ParkflowError,
    UpstreamUnavailable,
)
from parkflow.infrastructure.geocoding.nominatim import NominatimGeocoder
from parkflow.infrastructure.persistence.change_feed import change_feed
from parkflow.infrastructure.persistence.database import get_async_db
from parkflow.infrastructure.persistence.sqlalchemy_repositories import (
    SQLAlchemyBookingRepository,
    SQLAlchemyBusinessAccountRepository,
    SQLAlchemyParkingLotRepository,
)

STATUS_CODES = {
    InvalidInterval: 400,
    InvalidPricing: 400,
    InvalidCapacity: 400,
    BusinessNotApproved: 403,
    LotNotFound: 404,
    BookingNotFound: 404,
    AccountNotFound: 404,
    DuplicateActiveBooking: 409,
    AlreadyCompleted: 409,
    UpstreamUnavailable: 503,
}

_geocoder = None


def http_error(error: ParkflowError) -> HTTPException:
    for error_type, status_code in STATUS_CODES.items():
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(status_code=500, detail=f"Internal error: {error}")


def get_geocoder() -> NominatimGeocoder:
    global _geocoder
    if _geocoder is None:
        _geocoder = NominatimGeocoder()
    return _geocoder


def get_booking_service(db: AsyncSession = Depends(get_async_db)) -> BookingService:
    return BookingService(
        lot_repo=SQLAlchemyParkingLotRepository(db, change_feed),
        booking_repo=SQLAlchemyBookingRepository(db, change_feed),
        account_repo=SQLAlchemyBusinessAccountRepository(db, change_feed),
    )


def get_lot_service(
    db: AsyncSession = Depends(get_async_db),
    geocoder: NominatimGeocoder = Depends(get_geocoder),
) -> LotService:
    return LotService(
        lot_repo=SQLAlchemyParkingLotRepository(db, change_feed),
        account_repo=SQLAlchemyBusinessAccountRepository(db, change_feed),
        geocoder=geocoder,
    )


def get_admin_service(db: AsyncSession = Depends(get_async_db)) -> AdminService:
    return AdminService(
        account_repo=SQLAlchemyBusinessAccountRepository(db, change_feed),
        lot_repo=SQLAlchemyParkingLotRepository(db, change_feed),
        booking_repo=SQLAlchemyBookingRepository(db, change_feed),
    )
