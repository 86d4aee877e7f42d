"""
Lead endpoints.

POST /api/leads/create    — public contact form submission
GET  /api/leads/test      — liveness probe
GET  /api/leads           — admin: filtered, paginated list
GET/PUT/DELETE /api/leads/{lead_id} — admin review
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from dependencies import get_client, get_lead_service, require_admin
from schemas.dto.requests.lead import CreateLeadRequest, ListLeadsQuery, UpdateLeadRequest
from schemas.dto.responses.common import envelope
from services.lead_service import LeadService
from shared.ip_utils import ClientContext
from shared.jwt_utils import AdminIdentity

router = APIRouter(prefix="/leads", tags=["leads"])


@router.get("/test")
async def leads_test():
    return envelope(message="Leads routes are working")


@router.post("/create")
async def create_lead(
    payload: CreateLeadRequest,
    client: ClientContext = Depends(get_client),
    service: LeadService = Depends(get_lead_service),
):
    lead = await service.create_lead(payload, client)
    return JSONResponse(
        status_code=201,
        content=envelope({"leadId": str(lead.id)}, "Lead created successfully"),
    )


@router.get("")
async def list_leads(
    query: Annotated[ListLeadsQuery, Query()],
    admin: AdminIdentity = Depends(require_admin),
    service: LeadService = Depends(get_lead_service),
):
    leads, pagination = await service.list_leads(query)
    return envelope(
        {"leads": [lead.to_api() for lead in leads], "pagination": pagination.model_dump()}
    )


@router.get("/{lead_id}")
async def get_lead(
    lead_id: str,
    admin: AdminIdentity = Depends(require_admin),
    service: LeadService = Depends(get_lead_service),
):
    lead = await service.get_lead(lead_id)
    return envelope({"lead": lead.to_api()})


@router.put("/{lead_id}")
async def update_lead(
    lead_id: str,
    payload: UpdateLeadRequest,
    admin: AdminIdentity = Depends(require_admin),
    service: LeadService = Depends(get_lead_service),
):
    lead = await service.update_lead(lead_id, payload, admin)
    return envelope({"lead": lead.to_api()}, "Lead updated successfully")


@router.delete("/{lead_id}")
async def delete_lead(
    lead_id: str,
    admin: AdminIdentity = Depends(require_admin),
    service: LeadService = Depends(get_lead_service),
):
    await service.delete_lead(lead_id)
    return envelope(message="Lead deleted successfully")
