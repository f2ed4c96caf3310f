from typing import Dict, List, Optional

from loguru import logger
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from parkflow.application.repositories import (
    AbstractBookingRepository,
    AbstractBusinessAccountRepository,
    AbstractChangeFeed,
    AbstractParkingLotRepository,
)
from parkflow.domain.common import (
    BillingMode,
    BookingStatus,
    BusinessStatus,
    PaymentMethod,
    VehicleType,
)
from parkflow.domain.entities import Booking, BusinessAccount, ParkingLot
from parkflow.domain.exceptions import (
    AccountNotFound,
    AlreadyCompleted,
    BookingNotFound,
    DuplicateActiveBooking,
    LotNotFound,
    UpstreamUnavailable,
)
from parkflow.infrastructure.persistence.models.models import (
    Booking as ORMBooking,
    BusinessProfile as ORMBusinessProfile,
    ParkingAsset as ORMParkingAsset,
)


def _to_account(orm_account: ORMBusinessProfile) -> BusinessAccount:
    return BusinessAccount(
        id=orm_account.id,
        user_id=orm_account.user_id,
        business_name=orm_account.business_name,
        status=BusinessStatus(orm_account.status),
        license_id=orm_account.license_id,
        full_name=orm_account.full_name,
        email=orm_account.email,
        proof_doc_url=orm_account.proof_doc_url,
        created_at=orm_account.created_at,
    )


def _to_lot(orm_lot: ORMParkingAsset) -> ParkingLot:
    return ParkingLot(
        id=orm_lot.id,
        owner_id=orm_lot.owner_id,
        name=orm_lot.name,
        address=orm_lot.address,
        latitude=orm_lot.latitude,
        longitude=orm_lot.longitude,
        price_per_hour=orm_lot.price_per_hour,
        max_duration_hours=orm_lot.max_duration,
        fine_amount=orm_lot.fine_amount,
        billing_mode=BillingMode(orm_lot.billing_mode),
        total_slots_car=orm_lot.total_slots_car,
        total_slots_bike=orm_lot.total_slots_bike,
        available_slots_car=orm_lot.available_slots_car,
        available_slots_bike=orm_lot.available_slots_bike,
        is_available=orm_lot.is_available,
    )


def _to_booking(orm_booking: ORMBooking) -> Booking:
    return Booking(
        id=orm_booking.id,
        parking_id=orm_booking.parking_id,
        vehicle_number=orm_booking.vehicle_number,
        vehicle_type=VehicleType(orm_booking.vehicle_type),
        owner_name=orm_booking.owner_name,
        entry_time=orm_booking.entry_time,
        exit_time=orm_booking.exit_time,
        status=BookingStatus(orm_booking.status),
        total_amount=orm_booking.total_amount,
        payment_method=PaymentMethod(orm_booking.payment_method) if orm_booking.payment_method else None,
    )


class SQLAlchemyRepository:
    def __init__(self, session: AsyncSession, change_feed: Optional[AbstractChangeFeed] = None):
        self.session = session
        self.change_feed = change_feed

    async def _execute(self, statement):
        try:
            return await self.session.execute(statement)
        except SQLAlchemyError as e:
            logger.error(f"Data store query failed: {e}")
            raise UpstreamUnavailable("Data store query failed") from e

    async def _get(self, model, pk):
        result = await self._execute(
            select(model).where(model.id == pk).execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def _commit(self):
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Data store write failed: {e}")
            raise UpstreamUnavailable("Data store write failed") from e

    def _publish(self, table: str, event: str, row: dict):
        if self.change_feed is not None:
            self.change_feed.publish(table, event, row)


class SQLAlchemyBusinessAccountRepository(SQLAlchemyRepository, AbstractBusinessAccountRepository):
    async def get_by_id(self, account_id: int) -> Optional[BusinessAccount]:
        result = await self._execute(
            select(ORMBusinessProfile).where(ORMBusinessProfile.id == account_id)
        )
        orm_account = result.scalars().first()
        return _to_account(orm_account) if orm_account else None

    async def add(self, account: BusinessAccount) -> BusinessAccount:
        orm_account = ORMBusinessProfile(
            user_id=account.user_id,
            business_name=account.business_name,
            license_id=account.license_id,
            full_name=account.full_name,
            email=account.email,
            proof_doc_url=account.proof_doc_url,
            status=BusinessStatus(account.status).value,
        )
        self.session.add(orm_account)
        await self._commit()
        await self.session.refresh(orm_account)
        self._publish(ORMBusinessProfile.__tablename__, "INSERT", orm_account.to_dict())
        return _to_account(orm_account)

    async def list_by_status(self, status: Optional[BusinessStatus] = None) -> List[BusinessAccount]:
        query = select(ORMBusinessProfile).order_by(
            ORMBusinessProfile.created_at.desc(), ORMBusinessProfile.id.desc()
        )
        if status is not None:
            query = query.where(ORMBusinessProfile.status == BusinessStatus(status).value)
        result = await self._execute(query)
        return [_to_account(a) for a in result.scalars().all()]

    async def update_status(self, account_id: int, status: BusinessStatus) -> BusinessAccount:
        orm_account = await self._get(ORMBusinessProfile, account_id)
        if orm_account is None:
            raise AccountNotFound(account_id)
        orm_account.status = BusinessStatus(status).value
        await self._commit()
        await self.session.refresh(orm_account)
        self._publish(ORMBusinessProfile.__tablename__, "UPDATE", orm_account.to_dict())
        return _to_account(orm_account)


class SQLAlchemyParkingLotRepository(SQLAlchemyRepository, AbstractParkingLotRepository):
    async def get_by_id(self, lot_id: int) -> Optional[ParkingLot]:
        result = await self._execute(
            select(ORMParkingAsset).where(ORMParkingAsset.id == lot_id)
        )
        orm_lot = result.scalars().first()
        return _to_lot(orm_lot) if orm_lot else None

    async def get_by_owner(self, owner_id: int) -> Optional[ParkingLot]:
        result = await self._execute(
            select(ORMParkingAsset).where(ORMParkingAsset.owner_id == owner_id).order_by(ORMParkingAsset.id)
        )
        orm_lot = result.scalars().first()
        return _to_lot(orm_lot) if orm_lot else None

    async def list_available(self) -> List[ParkingLot]:
        result = await self._execute(
            select(ORMParkingAsset).where(ORMParkingAsset.is_available.is_(True)).order_by(ORMParkingAsset.id)
        )
        return [_to_lot(lot) for lot in result.scalars().all()]

    async def add(self, lot: ParkingLot) -> ParkingLot:
        orm_lot = ORMParkingAsset(owner_id=lot.owner_id)
        self._copy_fields(lot, orm_lot)
        self.session.add(orm_lot)
        await self._commit()
        await self.session.refresh(orm_lot)
        self._publish(ORMParkingAsset.__tablename__, "INSERT", orm_lot.to_dict())
        return _to_lot(orm_lot)

    async def update(self, lot: ParkingLot) -> ParkingLot:
        orm_lot = await self._get(ORMParkingAsset, lot.id)
        if orm_lot is None:
            raise LotNotFound(lot.id)
        self._copy_fields(lot, orm_lot)
        await self._commit()
        await self.session.refresh(orm_lot)
        self._publish(ORMParkingAsset.__tablename__, "UPDATE", orm_lot.to_dict())
        return _to_lot(orm_lot)

    @staticmethod
    def _copy_fields(lot: ParkingLot, orm_lot: ORMParkingAsset):
        orm_lot.name = lot.name
        orm_lot.address = lot.address
        orm_lot.latitude = lot.latitude
        orm_lot.longitude = lot.longitude
        orm_lot.price_per_hour = lot.price_per_hour
        orm_lot.max_duration = lot.max_duration_hours
        orm_lot.fine_amount = lot.fine_amount
        orm_lot.billing_mode = BillingMode(lot.billing_mode).value
        orm_lot.total_slots_car = lot.total_slots_car
        orm_lot.total_slots_bike = lot.total_slots_bike
        orm_lot.available_slots_car = lot.available_slots_car
        orm_lot.available_slots_bike = lot.available_slots_bike
        orm_lot.is_available = lot.is_available


class SQLAlchemyBookingRepository(SQLAlchemyRepository, AbstractBookingRepository):
    async def get_by_id(self, booking_id: int) -> Optional[Booking]:
        result = await self._execute(
            select(ORMBooking).where(ORMBooking.id == booking_id)
        )
        orm_booking = result.scalars().first()
        return _to_booking(orm_booking) if orm_booking else None

    async def get_active_by_plate(self, parking_id: int, vehicle_number: str) -> Optional[Booking]:
        result = await self._execute(
            select(ORMBooking).where(
                ORMBooking.parking_id == parking_id,
                ORMBooking.vehicle_number == vehicle_number.strip().upper(),
                ORMBooking.status == BookingStatus.ACTIVE.value,
            ).order_by(ORMBooking.entry_time.desc())
        )
        orm_booking = result.scalars().first()
        return _to_booking(orm_booking) if orm_booking else None

    async def list_active(self, parking_id: int) -> List[Booking]:
        result = await self._execute(
            select(ORMBooking).where(
                ORMBooking.parking_id == parking_id,
                ORMBooking.status == BookingStatus.ACTIVE.value,
            ).order_by(ORMBooking.entry_time.desc(), ORMBooking.id.desc())
        )
        return [_to_booking(b) for b in result.scalars().all()]

    async def list_all(self) -> List[Booking]:
        result = await self._execute(
            select(ORMBooking).order_by(ORMBooking.entry_time.desc(), ORMBooking.id.desc())
        )
        return [_to_booking(b) for b in result.scalars().all()]

    async def count_active_by_type(self, parking_id: int) -> Dict[VehicleType, int]:
        result = await self._execute(
            select(ORMBooking.vehicle_type, func.count(ORMBooking.id).label("count")).where(
                ORMBooking.parking_id == parking_id,
                ORMBooking.status == BookingStatus.ACTIVE.value,
            ).group_by(ORMBooking.vehicle_type)
        )
        counts = {vehicle_type: 0 for vehicle_type in VehicleType}
        for row in result:
            counts[VehicleType(row.vehicle_type)] = row.count
        return counts

    async def add(self, booking: Booking) -> Booking:
        orm_booking = ORMBooking(
            parking_id=booking.parking_id,
            vehicle_number=booking.vehicle_number,
            vehicle_type=VehicleType(booking.vehicle_type).value,
            owner_name=booking.owner_name,
            entry_time=booking.entry_time,
            status=BookingStatus(booking.status).value,
        )
        self.session.add(orm_booking)
        try:
            await self._commit()
        except IntegrityError as e:
            # Lost the race against a concurrent entry for the same plate
            raise DuplicateActiveBooking(booking.parking_id, booking.vehicle_number) from e
        await self.session.refresh(orm_booking)
        self._publish(ORMBooking.__tablename__, "INSERT", orm_booking.to_dict())
        return _to_booking(orm_booking)

    async def update(self, booking: Booking) -> Booking:
        """Write the checkout of a booking that is still active in the store.

        Matches on status so that only one of two overlapping checkouts lands;
        the other gets AlreadyCompleted and the stored amount is left alone.
        """
        result = await self._execute(
            update(ORMBooking)
            .where(ORMBooking.id == booking.id, ORMBooking.status == BookingStatus.ACTIVE.value)
            .values(
                exit_time=booking.exit_time,
                status=BookingStatus(booking.status).value,
                total_amount=booking.total_amount,
                payment_method=PaymentMethod(booking.payment_method).value if booking.payment_method else None,
            )
        )
        if result.rowcount == 0:
            await self.session.rollback()
            if await self._get(ORMBooking, booking.id) is None:
                raise BookingNotFound(booking.id)
            logger.warning(f"Booking {booking.id} was already completed by another checkout")
            raise AlreadyCompleted(booking.id)
        await self._commit()

        orm_booking = await self._get(ORMBooking, booking.id)
        self._publish(ORMBooking.__tablename__, "UPDATE", orm_booking.to_dict())
        return _to_booking(orm_booking)
