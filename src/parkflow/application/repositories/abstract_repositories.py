from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional

from parkflow.domain.common import BusinessStatus, VehicleType
from parkflow.domain.entities import Booking, BusinessAccount, ParkingLot


class AbstractBusinessAccountRepository(ABC):
    @abstractmethod
    async def get_by_id(self, account_id: int) -> Optional[BusinessAccount]:
        pass

    @abstractmethod
    async def add(self, account: BusinessAccount) -> BusinessAccount:
        pass

    @abstractmethod
    async def list_by_status(self, status: Optional[BusinessStatus] = None) -> List[BusinessAccount]:
        pass

    @abstractmethod
    async def update_status(self, account_id: int, status: BusinessStatus) -> BusinessAccount:
        pass


class AbstractParkingLotRepository(ABC):
    @abstractmethod
    async def get_by_id(self, lot_id: int) -> Optional[ParkingLot]:
        pass

    @abstractmethod
    async def get_by_owner(self, owner_id: int) -> Optional[ParkingLot]:
        pass

    @abstractmethod
    async def list_available(self) -> List[ParkingLot]:
        pass

    @abstractmethod
    async def add(self, lot: ParkingLot) -> ParkingLot:
        pass

    @abstractmethod
    async def update(self, lot: ParkingLot) -> ParkingLot:
        pass


class AbstractBookingRepository(ABC):
    @abstractmethod
    async def get_by_id(self, booking_id: int) -> Optional[Booking]:
        pass

    @abstractmethod
    async def get_active_by_plate(self, parking_id: int, vehicle_number: str) -> Optional[Booking]:
        pass

    @abstractmethod
    async def list_active(self, parking_id: int) -> List[Booking]:
        pass

    @abstractmethod
    async def list_all(self) -> List[Booking]:
        pass

    @abstractmethod
    async def count_active_by_type(self, parking_id: int) -> Dict[VehicleType, int]:
        pass

    @abstractmethod
    async def add(self, booking: Booking) -> Booking:
        pass

    @abstractmethod
    async def update(self, booking: Booking) -> Booking:
        """Persist a checkout; raises AlreadyCompleted if the stored booking is no longer active."""


class AbstractChangeFeed(ABC):
    """Row-change notifications keyed by table name."""

    @abstractmethod
    def subscribe(self, table: str, callback: Callable[[str, dict], None]) -> Callable[[], None]:
        """Register ``callback(event, row)``; returns a function that unsubscribes it."""

    @abstractmethod
    def publish(self, table: str, event: str, row: dict):
        pass


class AbstractGeocoder(ABC):
    @abstractmethod
    def reverse(self, latitude: float, longitude: float) -> Optional[str]:
        """Return a human-readable address for a point, or None if there is none."""
