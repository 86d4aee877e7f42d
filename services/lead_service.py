"""
Lead capture and admin review.

Creating a lead resolves the submitter's country transiently, stores the
lead as "new" and hands the saved lead to LeadNotifier, which emails the
site owner and the submitter in the background.
"""

from __future__ import annotations

from typing import Optional

from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from errors import DuplicateError, NotFoundError
from infrastructure.geolocation import GeoLocator
from repositories.lead_repository import LeadRepository, build_lead_query
from schemas.dto.requests.lead import CreateLeadRequest, ListLeadsQuery, UpdateLeadRequest
from schemas.dto.responses.common import PaginationMeta
from schemas.models.base import parse_object_id
from schemas.models.lead import LeadDoc
from services.common import page_offset, require_object_id
from services.notification_service import LeadNotifier
from shared.datetime_utils import utcnow
from shared.ip_utils import ClientContext
from shared.jwt_utils import AdminIdentity
from shared.logging import get_logger

log = get_logger(__name__)

LEAD_NOT_FOUND = "Lead not found"


class LeadService:
    def __init__(
        self,
        lead_repo: LeadRepository,
        geo_locator: GeoLocator,
        notifier: LeadNotifier,
    ) -> None:
        self._leads = lead_repo
        self._geo = geo_locator
        self._notifier = notifier

    async def create_lead(self, payload: CreateLeadRequest, client: ClientContext) -> LeadDoc:
        geo = await self._geo.locate(client.ip)
        now = utcnow()
        lead = LeadDoc(
            name=payload.name,
            email=payload.email,
            message=payload.message,
            page=payload.page or "contact",
            path=payload.path or "/contact",
            country=geo.country,
            country_code=geo.country_code,
            status="new",
            created_at=now,
            updated_at=now,
        )
        try:
            lead.id = await self._leads.insert(lead)
        except DuplicateKeyError:
            log.info("lead_duplicate_rejected", page=lead.page)
            raise DuplicateError("A lead with this email already exists", field="email")

        log.info("lead_created", lead_id=str(lead.id), page=lead.page, country=lead.country_code)
        self._notifier.notify(lead.model_dump(by_alias=True))
        return lead

    async def list_leads(self, query: ListLeadsQuery) -> tuple[list[LeadDoc], PaginationMeta]:
        mongo_query = build_lead_query(query.status, query.search)
        direction = -1 if query.sort_order == "desc" else 1
        leads = await self._leads.find_many(
            mongo_query,
            sort=[(query.sort_by, direction)],
            skip=page_offset(query.page, query.limit),
            limit=query.limit,
        )
        total = await self._leads.count(mongo_query)
        return leads, PaginationMeta.build(query.page, query.limit, total)

    async def get_lead(self, lead_id: str) -> LeadDoc:
        lead = await self._leads.find_by_id(require_object_id(lead_id, LEAD_NOT_FOUND))
        if lead is None:
            raise NotFoundError(LEAD_NOT_FOUND)
        return lead

    async def update_lead(
        self, lead_id: str, payload: UpdateLeadRequest, admin: AdminIdentity
    ) -> LeadDoc:
        oid = require_object_id(lead_id, LEAD_NOT_FOUND)
        now = utcnow()
        fields: dict = {"updatedAt": now}
        if payload.status is not None:
            fields["status"] = payload.status
        if payload.notes is not None:
            fields["notes"] = payload.notes.strip()

        contacted_by: Optional[object] = None
        if payload.status == "contacted":
            contacted_by = parse_object_id(admin.user_id) or admin.user_id

        lead = await self._leads.update_review(
            oid, fields=fields, contacted_by=contacted_by, now=now
        )
        if lead is None:
            raise NotFoundError(LEAD_NOT_FOUND)
        log.info("lead_updated", lead_id=lead_id, status=lead.status, admin_id=admin.user_id)
        return lead

    async def delete_lead(self, lead_id: str) -> None:
        oid: ObjectId = require_object_id(lead_id, LEAD_NOT_FOUND)
        if not await self._leads.delete_by_id(oid):
            raise NotFoundError(LEAD_NOT_FOUND)
        log.info("lead_deleted", lead_id=lead_id)
