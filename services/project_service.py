"""Portfolio project CRUD."""

from __future__ import annotations

from typing import Any

from errors import NotFoundError
from repositories.content_repository import ProjectRepository
from schemas.dto.requests.content import CreateProjectRequest, ListProjectsQuery, UpdateProjectRequest
from schemas.dto.responses.common import PaginationMeta
from schemas.models.content import ProjectDoc
from services.common import page_offset, require_object_id
from shared.datetime_utils import utcnow
from shared.logging import get_logger

log = get_logger(__name__)

PROJECT_NOT_FOUND = "Project not found"


class ProjectService:
    def __init__(self, project_repo: ProjectRepository) -> None:
        self._projects = project_repo

    async def list_projects(self, query: ListProjectsQuery) -> tuple[list[ProjectDoc], PaginationMeta]:
        mongo_query: dict[str, Any] = {}
        if query.featured is not None:
            mongo_query["featured"] = query.featured
        if query.is_custom_code is not None:
            mongo_query["isCustomCode"] = query.is_custom_code
        if query.category:
            mongo_query["category"] = query.category

        projects = await self._projects.list_projects(
            mongo_query, skip=page_offset(query.page, query.limit), limit=query.limit
        )
        total = await self._projects.count(mongo_query)
        return projects, PaginationMeta.build(query.page, query.limit, total)

    async def get_project(self, project_id: str) -> ProjectDoc:
        project = await self._projects.find_by_id(require_object_id(project_id, PROJECT_NOT_FOUND))
        if project is None:
            raise NotFoundError(PROJECT_NOT_FOUND)
        return project

    async def create_project(self, payload: CreateProjectRequest) -> ProjectDoc:
        now = utcnow()
        project = ProjectDoc(**payload.model_dump(), created_at=now, updated_at=now)
        project.id = await self._projects.insert(project)
        log.info("project_created", project_id=str(project.id))
        return project

    async def update_project(self, project_id: str, payload: UpdateProjectRequest) -> ProjectDoc:
        oid = require_object_id(project_id, PROJECT_NOT_FOUND)
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        changes["updated_at"] = utcnow()
        fields = {ProjectDoc.model_fields[name].alias: value for name, value in changes.items()}
        project = await self._projects.update_by_id(oid, {"$set": fields})
        if project is None:
            raise NotFoundError(PROJECT_NOT_FOUND)
        log.info("project_updated", project_id=project_id)
        return project

    async def delete_project(self, project_id: str) -> None:
        if not await self._projects.delete_by_id(require_object_id(project_id, PROJECT_NOT_FOUND)):
            raise NotFoundError(PROJECT_NOT_FOUND)
        log.info("project_deleted", project_id=project_id)
