from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from parkflow.application.services.booking_service import BookingService
from parkflow.application.services.lot_service import LotService
from parkflow.config.settings_env import settings
from parkflow.domain.exceptions import ParkflowError
from parkflow.domain.fare import format_duration, quote_fare
from parkflow.infrastructure.api.dependencies import get_booking_service, get_lot_service, http_error
from parkflow.infrastructure.api.schemas.parking import (
    AddressResponse,
    BookingResponse,
    CheckoutRequest,
    CheckoutResponse,
    FareQuoteRequest,
    FareQuoteResponse,
    LotCreate,
    LotResponse,
    LotSearchResponse,
    LotSettingsUpdate,
    OccupancyResponse,
    RankedLotResponse,
    VehicleEntry,
)

router = APIRouter(prefix="/api/parking", tags=["parking"])


@router.post("/lots", response_model=LotResponse, status_code=201)
async def register_lot(lot_data: LotCreate, service: LotService = Depends(get_lot_service)):
    try:
        return await service.register_lot(**lot_data.model_dump())
    except ParkflowError as e:
        raise http_error(e)


@router.get("/lots", response_model=List[LotResponse])
async def list_lots(service: LotService = Depends(get_lot_service)):
    try:
        return await service.list_available()
    except ParkflowError as e:
        raise http_error(e)


@router.get("/lots/nearby", response_model=List[RankedLotResponse])
async def find_nearby_lots(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    limit: Optional[int] = Query(default=None, ge=1),
    service: LotService = Depends(get_lot_service),
):
    try:
        return await service.find_nearby((lat, lng), limit=limit)
    except ParkflowError as e:
        raise http_error(e)


@router.get("/lots/search", response_model=LotSearchResponse)
async def search_lots(q: str = "", service: LotService = Depends(get_lot_service)):
    try:
        return await service.search(q)
    except ParkflowError as e:
        raise http_error(e)


@router.get("/lots/suggestions", response_model=List[str])
async def suggest_addresses(q: str = "", service: LotService = Depends(get_lot_service)):
    try:
        return await service.suggest(q)
    except ParkflowError as e:
        raise http_error(e)


@router.get("/geocode/reverse", response_model=AddressResponse)
async def reverse_geocode(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    service: LotService = Depends(get_lot_service),
):
    return AddressResponse(latitude=lat, longitude=lng, address=await service.resolve_address(lat, lng))


@router.get("/lots/{lot_id}", response_model=LotResponse)
async def get_lot(lot_id: int, service: LotService = Depends(get_lot_service)):
    try:
        return await service.get_lot(lot_id)
    except ParkflowError as e:
        raise http_error(e)


@router.patch("/lots/{lot_id}/settings", response_model=LotResponse)
async def update_lot_settings(
    lot_id: int,
    settings_data: LotSettingsUpdate,
    service: LotService = Depends(get_lot_service),
):
    try:
        return await service.update_settings(lot_id, **settings_data.model_dump(exclude_none=True))
    except ParkflowError as e:
        raise http_error(e)


@router.get("/lots/{lot_id}/occupancy", response_model=OccupancyResponse)
async def get_occupancy(lot_id: int, service: BookingService = Depends(get_booking_service)):
    try:
        return await service.get_occupancy(lot_id)
    except ParkflowError as e:
        raise http_error(e)


@router.get("/lots/{lot_id}/bookings/active", response_model=List[BookingResponse])
async def get_active_bookings(
    lot_id: int,
    search: Optional[str] = None,
    service: BookingService = Depends(get_booking_service),
):
    try:
        return await service.get_active_bookings(lot_id, search)
    except ParkflowError as e:
        raise http_error(e)


@router.post("/entry", response_model=BookingResponse, status_code=201)
async def vehicle_entry(entry_data: VehicleEntry, service: BookingService = Depends(get_booking_service)):
    try:
        return await service.register_entry(
            entry_data.parking_id,
            entry_data.vehicle_number,
            entry_data.vehicle_type,
            entry_data.owner_name,
        )
    except ParkflowError as e:
        raise http_error(e)


@router.get("/bookings/{booking_id}/quote", response_model=FareQuoteResponse)
async def preview_checkout(booking_id: int, service: BookingService = Depends(get_booking_service)):
    try:
        _, _, quote = await service.preview_checkout(booking_id)
        return quote
    except ParkflowError as e:
        raise http_error(e)


@router.post("/bookings/{booking_id}/checkout", response_model=CheckoutResponse)
async def checkout(
    booking_id: int,
    checkout_data: CheckoutRequest,
    service: BookingService = Depends(get_booking_service),
):
    try:
        booking, quote = await service.checkout(booking_id, payment_method=checkout_data.payment_method)
    except ParkflowError as e:
        raise http_error(e)
    return CheckoutResponse(
        booking=BookingResponse.model_validate(booking),
        quote=FareQuoteResponse.model_validate(quote),
        duration=format_duration(quote.duration_minutes),
        currency=settings.CURRENCY,
    )


@router.post("/fares/quote", response_model=FareQuoteResponse)
async def quote_stay(request: FareQuoteRequest):
    try:
        return quote_fare(
            request.entry_time,
            request.exit_time,
            request.price_per_hour,
            request.max_duration_hours,
            request.fine_amount,
            request.billing_mode,
        )
    except ParkflowError as e:
        raise http_error(e)
