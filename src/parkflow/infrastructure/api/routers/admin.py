from fastapi import APIRouter, Depends
from typing import List, Optional

from parkflow.application.services.admin_service import AdminService
from parkflow.domain.common import BusinessStatus
from parkflow.domain.entities import BusinessAccount
from parkflow.domain.exceptions import ParkflowError
from parkflow.infrastructure.api.dependencies import get_admin_service, http_error
from parkflow.infrastructure.api.schemas.parking import (
    BusinessRegistration,
    BusinessResponse,
    BusinessStats,
    BusinessStatusUpdate,
    VehicleRecord,
)

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.post("/businesses", response_model=BusinessResponse, status_code=201)
async def register_business(
    registration: BusinessRegistration,
    service: AdminService = Depends(get_admin_service),
):
    try:
        return await service.register_business(BusinessAccount(**registration.model_dump()))
    except ParkflowError as e:
        raise http_error(e)


@router.get("/businesses", response_model=List[BusinessResponse])
async def list_businesses(
    status: Optional[BusinessStatus] = None,
    service: AdminService = Depends(get_admin_service),
):
    try:
        return await service.list_businesses(status)
    except ParkflowError as e:
        raise http_error(e)


@router.get("/businesses/stats", response_model=BusinessStats)
async def get_business_stats(service: AdminService = Depends(get_admin_service)):
    try:
        return await service.get_stats()
    except ParkflowError as e:
        raise http_error(e)


@router.put("/businesses/{account_id}/status", response_model=BusinessResponse)
async def update_business_status(
    account_id: int,
    update: BusinessStatusUpdate,
    service: AdminService = Depends(get_admin_service),
):
    try:
        return await service.update_status(account_id, update.status)
    except ParkflowError as e:
        raise http_error(e)


@router.get("/vehicles", response_model=List[VehicleRecord])
async def list_vehicle_records(service: AdminService = Depends(get_admin_service)):
    try:
        return await service.list_vehicle_records()
    except ParkflowError as e:
        raise http_error(e)
