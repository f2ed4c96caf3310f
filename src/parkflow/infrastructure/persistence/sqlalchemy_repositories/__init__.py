from .sqlalchemy_repositories import (
    SQLAlchemyBusinessAccountRepository,
    SQLAlchemyParkingLotRepository,
    SQLAlchemyBookingRepository,
)

__all__ = [
    "SQLAlchemyBusinessAccountRepository",
    "SQLAlchemyParkingLotRepository",
    "SQLAlchemyBookingRepository",
]
