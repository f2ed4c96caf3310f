from datetime import datetime
from typing import Dict, List, Optional, Tuple
from loguru import logger

from parkflow.application.repositories import (
    AbstractBookingRepository,
    AbstractBusinessAccountRepository,
    AbstractParkingLotRepository,
)
from parkflow.domain.booking_lifecycle import checkout_booking, open_booking, preview_checkout
from parkflow.domain.common import BillingMode, PaymentMethod, VehicleType
from parkflow.domain.entities import Booking, FareQuote, ParkingLot
from parkflow.domain.exceptions import (
    AccountNotFound,
    AlreadyCompleted,
    BookingNotFound,
    BusinessNotApproved,
    LotNotFound,
    UpstreamUnavailable,
)


class BookingService:
    def __init__(
        self,
        lot_repo: AbstractParkingLotRepository,
        booking_repo: AbstractBookingRepository,
        account_repo: AbstractBusinessAccountRepository,
    ):
        self.lot_repo = lot_repo
        self.booking_repo = booking_repo
        self.account_repo = account_repo

    async def register_entry(
        self,
        lot_id: int,
        vehicle_number: str,
        vehicle_type: VehicleType = VehicleType.CAR,
        owner_name: Optional[str] = None,
    ) -> Booking:
        lot = await self._get_lot(lot_id)
        await self._ensure_owner_approved(lot)

        # Read-then-write: two concurrent entries can both pass this check.
        # The unique index on active bookings is what finally rejects the loser.
        existing = await self.booking_repo.get_active_by_plate(lot.id, vehicle_number)
        booking = open_booking(lot, vehicle_number, vehicle_type, owner_name, existing=existing)

        new_booking = await self.booking_repo.add(booking)
        await self._sync_availability(lot)

        logger.info(f"Vehicle {new_booking.vehicle_number} entered lot {lot.id} ({lot.name})")
        return new_booking

    async def preview_checkout(self, booking_id: int, at: Optional[datetime] = None) -> Tuple[Booking, ParkingLot, FareQuote]:
        booking = await self._get_booking(booking_id)
        if not booking.is_active:
            raise AlreadyCompleted(booking.id)
        lot = await self._get_lot(booking.parking_id)
        return booking, lot, preview_checkout(booking, lot, at=at)

    async def checkout(
        self,
        booking_id: int,
        payment_method: Optional[PaymentMethod] = None,
        exit_time: Optional[datetime] = None,
        billing_mode: Optional[BillingMode] = None,
    ) -> Tuple[Booking, FareQuote]:
        booking = await self._get_booking(booking_id)
        lot = await self._get_lot(booking.parking_id)
        await self._ensure_owner_approved(lot)

        updated, quote = checkout_booking(
            booking, lot, exit_time=exit_time, billing_mode=billing_mode, payment_method=payment_method
        )
        saved = await self.booking_repo.update(updated)
        await self._sync_availability(lot)

        logger.info(
            f"Vehicle {saved.vehicle_number} left lot {lot.id} after {quote.duration_minutes} min. "
            f"Amount: {saved.total_amount}"
        )
        return saved, quote

    async def get_active_bookings(self, lot_id: int, search: Optional[str] = None) -> List[Booking]:
        bookings = await self.booking_repo.list_active(lot_id)
        search = (search or "").strip().lower()
        if search:
            bookings = [b for b in bookings if search in b.vehicle_number.lower()]
        return bookings

    async def get_occupancy(self, lot_id: int) -> Dict[str, Dict[str, int]]:
        lot = await self._get_lot(lot_id)
        counts = await self.booking_repo.count_active_by_type(lot.id)

        occupancy = {}
        for vehicle_type in VehicleType:
            total = lot.total_slots(vehicle_type)
            occupied = counts.get(vehicle_type, 0)
            occupancy[vehicle_type.value] = {
                "total": total,
                "occupied": occupied,
                "available": max(total - occupied, 0),
            }
        return occupancy

    async def _get_lot(self, lot_id: int) -> ParkingLot:
        lot = await self.lot_repo.get_by_id(lot_id)
        if lot is None:
            raise LotNotFound(lot_id)
        return lot

    async def _get_booking(self, booking_id: int) -> Booking:
        booking = await self.booking_repo.get_by_id(booking_id)
        if booking is None:
            raise BookingNotFound(booking_id)
        return booking

    async def _ensure_owner_approved(self, lot: ParkingLot):
        account = await self.account_repo.get_by_id(lot.owner_id)
        if account is None:
            raise AccountNotFound(lot.owner_id)
        if not account.is_approved:
            raise BusinessNotApproved(account.status.value)

    async def _sync_availability(self, lot: ParkingLot):
        # Availability is derived from active bookings and recomputed on every
        # entry and checkout, so a failed refresh is corrected by the next one.
        try:
            counts = await self.booking_repo.count_active_by_type(lot.id)
            for vehicle_type in VehicleType:
                lot.set_available_slots(vehicle_type, lot.total_slots(vehicle_type) - counts.get(vehicle_type, 0))
            await self.lot_repo.update(lot)
        except UpstreamUnavailable as e:
            logger.warning(f"Could not refresh availability of lot {lot.id}: {e}")
