import asyncio
from typing import List, Optional
from loguru import logger

from parkflow.application.repositories import (
    AbstractBusinessAccountRepository,
    AbstractGeocoder,
    AbstractParkingLotRepository,
)
from parkflow.config.settings_env import settings
from parkflow.domain.common import BillingMode, VehicleType
from parkflow.domain.entities import ParkingLot
from parkflow.domain.exceptions import AccountNotFound, InvalidCapacity, LotNotFound, UpstreamUnavailable
from parkflow.domain.fare import validate_pricing
from parkflow.domain.geo import (
    Position,
    RankedLot,
    SearchResult,
    rank_by_distance,
    rank_by_query,
    shorten_address,
    suggest_addresses,
)


class LotService:
    def __init__(
        self,
        lot_repo: AbstractParkingLotRepository,
        account_repo: AbstractBusinessAccountRepository,
        geocoder: Optional[AbstractGeocoder] = None,
    ):
        self.lot_repo = lot_repo
        self.account_repo = account_repo
        self.geocoder = geocoder

    async def register_lot(
        self,
        owner_id: int,
        name: str,
        price_per_hour: float = 0.0,
        total_slots_car: int = 0,
        total_slots_bike: int = 0,
        max_duration_hours: Optional[float] = None,
        fine_amount: float = 0.0,
        address: Optional[str] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        billing_mode: Optional[BillingMode] = None,
    ) -> ParkingLot:
        account = await self.account_repo.get_by_id(owner_id)
        if account is None:
            raise AccountNotFound(owner_id)

        if max_duration_hours is None:
            max_duration_hours = settings.DEFAULT_MAX_DURATION_HOURS
        validate_pricing(price_per_hour, max_duration_hours, fine_amount)
        _validate_slots(total_slots_car, total_slots_bike)

        if not address and latitude is not None and longitude is not None:
            address = await self.resolve_address(latitude, longitude)

        lot = ParkingLot(
            owner_id=owner_id,
            name=name,
            address=address,
            latitude=latitude,
            longitude=longitude,
            price_per_hour=price_per_hour,
            max_duration_hours=max_duration_hours,
            fine_amount=fine_amount,
            billing_mode=BillingMode(billing_mode or settings.DEFAULT_BILLING_MODE),
            total_slots_car=total_slots_car,
            total_slots_bike=total_slots_bike,
        )
        lot = await self.lot_repo.add(lot)
        logger.info(f"Registered lot {lot.id} ({lot.name}) for business {owner_id}")
        return lot

    async def update_settings(
        self,
        lot_id: int,
        price_per_hour: Optional[float] = None,
        total_slots_car: Optional[int] = None,
        total_slots_bike: Optional[int] = None,
        max_duration_hours: Optional[float] = None,
        fine_amount: Optional[float] = None,
        billing_mode: Optional[BillingMode] = None,
        is_available: Optional[bool] = None,
    ) -> ParkingLot:
        lot = await self.get_lot(lot_id)

        price_per_hour = lot.price_per_hour if price_per_hour is None else price_per_hour
        max_duration_hours = lot.max_duration_hours if max_duration_hours is None else max_duration_hours
        fine_amount = lot.fine_amount if fine_amount is None else fine_amount
        validate_pricing(price_per_hour, max_duration_hours, fine_amount)

        new_car = lot.total_slots_car if total_slots_car is None else total_slots_car
        new_bike = lot.total_slots_bike if total_slots_bike is None else total_slots_bike
        _validate_slots(new_car, new_bike)

        # Keep the number of occupied slots while resizing
        occupied_car = lot.total_slots_car - lot.available_slots_car
        occupied_bike = lot.total_slots_bike - lot.available_slots_bike
        lot.total_slots_car = new_car
        lot.total_slots_bike = new_bike
        lot.set_available_slots(VehicleType.CAR, new_car - occupied_car)
        lot.set_available_slots(VehicleType.BIKE, new_bike - occupied_bike)

        lot.price_per_hour = price_per_hour
        lot.max_duration_hours = max_duration_hours
        lot.fine_amount = fine_amount
        if billing_mode is not None:
            lot.billing_mode = BillingMode(billing_mode)
        if is_available is not None:
            lot.is_available = is_available

        lot = await self.lot_repo.update(lot)
        logger.info(f"Updated settings of lot {lot.id}: {lot.price_per_hour}/h, max {lot.max_duration_hours}h")
        return lot

    async def get_lot(self, lot_id: int) -> ParkingLot:
        lot = await self.lot_repo.get_by_id(lot_id)
        if lot is None:
            raise LotNotFound(lot_id)
        return lot

    async def get_lot_for_owner(self, owner_id: int) -> ParkingLot:
        lot = await self.lot_repo.get_by_owner(owner_id)
        if lot is None:
            raise LotNotFound(f"owned by {owner_id}")
        return lot

    async def list_available(self) -> List[ParkingLot]:
        return await self.lot_repo.list_available()

    async def find_nearby(self, position: Position, limit: Optional[int] = None) -> List[RankedLot]:
        ranked = rank_by_distance(position, await self.lot_repo.list_available())
        return ranked[:limit] if limit else ranked

    async def search(self, query: Optional[str]) -> SearchResult:
        return rank_by_query(await self.lot_repo.list_available(), query)

    async def suggest(self, query: Optional[str] = None, limit: int = 5) -> List[str]:
        return suggest_addresses(await self.lot_repo.list_available(), query, limit)

    async def resolve_address(self, latitude: float, longitude: float) -> Optional[str]:
        """Short address for a point, or None if the lookup is unavailable.

        The geocoder client blocks, so it runs in a worker thread.
        """
        if self.geocoder is None:
            return None
        try:
            display_name = await asyncio.to_thread(self.geocoder.reverse, latitude, longitude)
            return shorten_address(display_name)
        except UpstreamUnavailable:
            logger.warning(f"No address for ({latitude}, {longitude}); geocoder unavailable")
            return None


def _validate_slots(total_slots_car: int, total_slots_bike: int):
    if total_slots_car < 0 or total_slots_bike < 0:
        raise InvalidCapacity("Slot counts must be non-negative")
