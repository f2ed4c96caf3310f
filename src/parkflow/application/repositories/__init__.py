from .abstract_repositories import (
    AbstractBusinessAccountRepository,
    AbstractParkingLotRepository,
    AbstractBookingRepository,
    AbstractChangeFeed,
    AbstractGeocoder,
)

__all__ = [
    "AbstractBusinessAccountRepository",
    "AbstractParkingLotRepository",
    "AbstractBookingRepository",
    "AbstractChangeFeed",
    "AbstractGeocoder",
]
