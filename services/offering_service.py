"""Service-offering CRUD (the "services" shown on the portfolio)."""

from __future__ import annotations

from errors import NotFoundError
from repositories.content_repository import ServiceRepository
from schemas.dto.requests.content import CreateServiceRequest, ListServicesQuery, UpdateServiceRequest
from schemas.dto.responses.common import PaginationMeta
from schemas.models.content import ServiceDoc
from services.common import page_offset, require_object_id
from shared.datetime_utils import utcnow
from shared.logging import get_logger

log = get_logger(__name__)

SERVICE_NOT_FOUND = "Service not found"


class OfferingService:
    def __init__(self, service_repo: ServiceRepository) -> None:
        self._services = service_repo

    async def list_services(self, query: ListServicesQuery) -> tuple[list[ServiceDoc], PaginationMeta]:
        mongo_query = {"active": query.active}
        services = await self._services.list_services(
            mongo_query, skip=page_offset(query.page, query.limit), limit=query.limit
        )
        total = await self._services.count(mongo_query)
        return services, PaginationMeta.build(query.page, query.limit, total)

    async def get_service(self, service_id: str) -> ServiceDoc:
        service = await self._services.find_by_id(require_object_id(service_id, SERVICE_NOT_FOUND))
        if service is None:
            raise NotFoundError(SERVICE_NOT_FOUND)
        return service

    async def create_service(self, payload: CreateServiceRequest) -> ServiceDoc:
        now = utcnow()
        service = ServiceDoc(**payload.model_dump(), created_at=now, updated_at=now)
        service.id = await self._services.insert(service)
        log.info("service_created", service_id=str(service.id))
        return service

    async def update_service(self, service_id: str, payload: UpdateServiceRequest) -> ServiceDoc:
        oid = require_object_id(service_id, SERVICE_NOT_FOUND)
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        changes["updated_at"] = utcnow()
        fields = {ServiceDoc.model_fields[name].alias: value for name, value in changes.items()}
        service = await self._services.update_by_id(oid, {"$set": fields})
        if service is None:
            raise NotFoundError(SERVICE_NOT_FOUND)
        log.info("service_updated", service_id=service_id)
        return service

    async def delete_service(self, service_id: str) -> None:
        if not await self._services.delete_by_id(require_object_id(service_id, SERVICE_NOT_FOUND)):
            raise NotFoundError(SERVICE_NOT_FOUND)
        log.info("service_deleted", service_id=service_id)
