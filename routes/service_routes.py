"""
Service offering endpoints.

The public list defaults to active services only; writes require an admin
token.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from dependencies import get_offering_service, require_admin
from schemas.dto.requests.content import (
    CreateServiceRequest,
    ListServicesQuery,
    UpdateServiceRequest,
)
from schemas.dto.responses.common import envelope
from services.offering_service import OfferingService
from shared.jwt_utils import AdminIdentity

router = APIRouter(prefix="/services", tags=["services"])


@router.get("")
async def list_services(
    query: Annotated[ListServicesQuery, Query()],
    service: OfferingService = Depends(get_offering_service),
):
    services, pagination = await service.list_services(query)
    return envelope(
        {"services": [s.to_api() for s in services], "pagination": pagination.model_dump()}
    )


@router.get("/{service_id}")
async def get_service(service_id: str, service: OfferingService = Depends(get_offering_service)):
    offering = await service.get_service(service_id)
    return envelope({"service": offering.to_api()})


@router.post("")
async def create_service(
    payload: CreateServiceRequest,
    admin: AdminIdentity = Depends(require_admin),
    service: OfferingService = Depends(get_offering_service),
):
    offering = await service.create_service(payload)
    return JSONResponse(
        status_code=201,
        content=envelope({"service": offering.to_api()}, "Service created successfully"),
    )


@router.put("/{service_id}")
async def update_service(
    service_id: str,
    payload: UpdateServiceRequest,
    admin: AdminIdentity = Depends(require_admin),
    service: OfferingService = Depends(get_offering_service),
):
    offering = await service.update_service(service_id, payload)
    return envelope({"service": offering.to_api()}, "Service updated successfully")


@router.delete("/{service_id}")
async def delete_service(
    service_id: str,
    admin: AdminIdentity = Depends(require_admin),
    service: OfferingService = Depends(get_offering_service),
):
    await service.delete_service(service_id)
    return envelope(message="Service deleted successfully")
