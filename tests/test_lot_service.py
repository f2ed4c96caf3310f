import threading

import pytest

from parkflow.config.settings_env import settings
from parkflow.domain.common import BillingMode, VehicleType
from parkflow.domain.exceptions import AccountNotFound, InvalidCapacity, InvalidPricing, LotNotFound


class TestRegisterLot:
    async def test_register_lot(self, lot_service, approved_business):
        lot = await lot_service.register_lot(
            owner_id=approved_business.id,
            name="Sundhara Parking",
            price_per_hour=30.0,
            total_slots_car=10,
            total_slots_bike=25,
            max_duration_hours=6.0,
            fine_amount=250.0,
            address="Sundhara, Kathmandu",
            billing_mode=BillingMode.PER_HOUR_BLOCK,
        )

        assert lot.id is not None
        assert lot.available_slots_car == 10
        assert lot.available_slots_bike == 25
        assert lot.billing_mode == BillingMode.PER_HOUR_BLOCK
        assert lot.is_available is True

    async def test_defaults_come_from_settings(self, lot_service, approved_business):
        lot = await lot_service.register_lot(owner_id=approved_business.id, name="Defaults")
        assert lot.max_duration_hours == settings.DEFAULT_MAX_DURATION_HOURS
        assert lot.billing_mode == BillingMode(settings.DEFAULT_BILLING_MODE)

    async def test_address_is_resolved_from_coordinates(self, lot_service, geocoder, approved_business):
        lot = await lot_service.register_lot(
            owner_id=approved_business.id, name="Mapped", latitude=27.7041, longitude=85.3077
        )
        assert geocoder.calls == [(27.7041, 85.3077)]
        assert lot.address == "New Road, Kathmandu"

    async def test_geocoder_runs_off_the_event_loop(self, lot_service, geocoder, approved_business):
        await lot_service.register_lot(
            owner_id=approved_business.id, name="Mapped", latitude=27.7041, longitude=85.3077
        )
        assert len(geocoder.threads) == 1
        assert geocoder.threads[0] != threading.get_ident()

    async def test_given_address_is_not_overwritten(self, lot_service, geocoder, approved_business):
        lot = await lot_service.register_lot(
            owner_id=approved_business.id, name="Mapped", address="Asan",
            latitude=27.7041, longitude=85.3077,
        )
        assert geocoder.calls == []
        assert lot.address == "Asan"

    async def test_geocoder_failure_is_not_fatal(self, lot_service, geocoder, approved_business):
        geocoder.fail = True
        lot = await lot_service.register_lot(
            owner_id=approved_business.id, name="Mapped", latitude=27.7, longitude=85.3
        )
        assert lot.id is not None
        assert lot.address is None

    async def test_unknown_owner(self, lot_service):
        with pytest.raises(AccountNotFound):
            await lot_service.register_lot(owner_id=42, name="Orphan")

    async def test_negative_price(self, lot_service, approved_business):
        with pytest.raises(InvalidPricing):
            await lot_service.register_lot(owner_id=approved_business.id, name="Bad", price_per_hour=-1.0)

    async def test_zero_maximum_duration_is_not_replaced_by_default(self, lot_service, approved_business):
        with pytest.raises(InvalidPricing, match="Maximum duration"):
            await lot_service.register_lot(owner_id=approved_business.id, name="Bad", max_duration_hours=0)

    async def test_negative_capacity(self, lot_service, approved_business):
        with pytest.raises(InvalidCapacity):
            await lot_service.register_lot(owner_id=approved_business.id, name="Bad", total_slots_car=-1)


class TestUpdateSettings:
    async def test_update_pricing(self, lot_service, parking_lot):
        lot = await lot_service.update_settings(
            parking_lot.id, price_per_hour=80.0, max_duration_hours=5.0, fine_amount=100.0,
            billing_mode=BillingMode.PER_HOUR_BLOCK,
        )
        assert lot.price_per_hour == 80.0
        assert lot.max_duration_hours == 5.0
        assert lot.fine_amount == 100.0
        assert lot.billing_mode == BillingMode.PER_HOUR_BLOCK

        stored = await lot_service.get_lot(parking_lot.id)
        assert stored.price_per_hour == 80.0

    async def test_resize_keeps_occupied_slots(self, lot_service, booking_service, parking_lot):
        await booking_service.register_entry(parking_lot.id, "BA 1 PA 1", VehicleType.CAR)

        lot = await lot_service.update_settings(parking_lot.id, total_slots_car=5)
        assert lot.total_slots_car == 5
        assert lot.available_slots_car == 4

    async def test_shrinking_below_occupancy_clamps_to_zero(self, lot_service, booking_service, parking_lot):
        await booking_service.register_entry(parking_lot.id, "BA 1 PA 1", VehicleType.BIKE)
        await booking_service.register_entry(parking_lot.id, "BA 1 PA 2", VehicleType.BIKE)

        lot = await lot_service.update_settings(parking_lot.id, total_slots_bike=1)
        assert lot.available_slots_bike == 0

    async def test_invalid_maximum_duration(self, lot_service, parking_lot):
        with pytest.raises(InvalidPricing):
            await lot_service.update_settings(parking_lot.id, max_duration_hours=0)

    async def test_unknown_lot(self, lot_service):
        with pytest.raises(LotNotFound):
            await lot_service.update_settings(999, price_per_hour=1.0)

    async def test_hidden_lot_is_not_listed(self, lot_service, parking_lot):
        await lot_service.update_settings(parking_lot.id, is_available=False)
        assert await lot_service.list_available() == []


class TestDiscovery:
    async def test_get_lot_for_owner(self, lot_service, parking_lot, approved_business):
        lot = await lot_service.get_lot_for_owner(approved_business.id)
        assert lot.id == parking_lot.id

    async def test_owner_without_lot(self, lot_service, pending_business):
        with pytest.raises(LotNotFound):
            await lot_service.get_lot_for_owner(pending_business.id)

    async def test_find_nearby(self, lot_service, parking_lot, pending_lot):
        ranked = await lot_service.find_nearby((27.7050, 85.3080))
        # pending_lot has no coordinates
        assert [r.lot.id for r in ranked] == [parking_lot.id]
        assert ranked[0].distance_km < 1

    async def test_search(self, lot_service, parking_lot, pending_lot):
        result = await lot_service.search("patan")
        assert result.lots[0].id == pending_lot.id
        assert result.focus.id == pending_lot.id
        assert len(result.lots) == 2

    async def test_suggest(self, lot_service, parking_lot, pending_lot):
        assert await lot_service.suggest("new") == ["New Road, Kathmandu"]


async def test_resolve_address_without_geocoder():
    from parkflow.application.services.lot_service import LotService
    service = LotService(lot_repo=None, account_repo=None)
    assert await service.resolve_address(27.7, 85.3) is None
