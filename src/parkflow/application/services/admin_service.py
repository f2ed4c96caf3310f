from typing import Dict, List, Optional
from loguru import logger

from parkflow.application.repositories import (
    AbstractBookingRepository,
    AbstractBusinessAccountRepository,
    AbstractParkingLotRepository,
)
from parkflow.domain.common import BusinessStatus
from parkflow.domain.entities import BusinessAccount


class AdminService:
    def __init__(
        self,
        account_repo: AbstractBusinessAccountRepository,
        lot_repo: AbstractParkingLotRepository,
        booking_repo: AbstractBookingRepository,
    ):
        self.account_repo = account_repo
        self.lot_repo = lot_repo
        self.booking_repo = booking_repo

    async def register_business(self, account: BusinessAccount) -> BusinessAccount:
        # New businesses always wait for approval
        account.status = BusinessStatus.PENDING
        account = await self.account_repo.add(account)
        logger.info(f"Business {account.business_name} registered, pending approval")
        return account

    async def list_businesses(self, status: Optional[BusinessStatus] = None) -> List[BusinessAccount]:
        return await self.account_repo.list_by_status(status)

    async def update_status(self, account_id: int, status: BusinessStatus) -> BusinessAccount:
        account = await self.account_repo.update_status(account_id, BusinessStatus(status))
        logger.info(f"Business {account.id} ({account.business_name}) is now {account.status.value}")
        return account

    async def get_stats(self) -> Dict[str, int]:
        accounts = await self.account_repo.list_by_status()
        return {
            "total": len(accounts),
            "pending": sum(1 for a in accounts if a.status == BusinessStatus.PENDING),
            "approved": sum(1 for a in accounts if a.status == BusinessStatus.APPROVED),
        }

    async def list_vehicle_records(self) -> List[Dict]:
        """Every booking across all lots, newest entry first, with the lot name."""
        bookings = await self.booking_repo.list_all()
        lot_names = {}
        records = []
        for booking in bookings:
            if booking.parking_id not in lot_names:
                lot = await self.lot_repo.get_by_id(booking.parking_id)
                lot_names[booking.parking_id] = lot.name if lot else None
            records.append({
                "id": booking.id,
                "lot_name": lot_names[booking.parking_id],
                "owner_name": booking.owner_name,
                "vehicle_number": booking.vehicle_number,
                "vehicle_type": booking.vehicle_type.value,
                "entry_time": booking.entry_time,
                "exit_time": booking.exit_time,
                "status": booking.status.value,
                "total_amount": booking.total_amount,
            })
        return records
