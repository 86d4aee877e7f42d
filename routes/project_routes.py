"""
Portfolio project endpoints.

GET /api/projects and GET /api/projects/{project_id} are public; writes
require an admin token.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from dependencies import get_project_service, require_admin
from schemas.dto.requests.content import (
    CreateProjectRequest,
    ListProjectsQuery,
    UpdateProjectRequest,
)
from schemas.dto.responses.common import envelope
from services.project_service import ProjectService
from shared.jwt_utils import AdminIdentity

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("")
async def list_projects(
    query: Annotated[ListProjectsQuery, Query()],
    service: ProjectService = Depends(get_project_service),
):
    projects, pagination = await service.list_projects(query)
    return envelope(
        {"projects": [p.to_api() for p in projects], "pagination": pagination.model_dump()}
    )


@router.get("/{project_id}")
async def get_project(project_id: str, service: ProjectService = Depends(get_project_service)):
    project = await service.get_project(project_id)
    return envelope({"project": project.to_api()})


@router.post("")
async def create_project(
    payload: CreateProjectRequest,
    admin: AdminIdentity = Depends(require_admin),
    service: ProjectService = Depends(get_project_service),
):
    project = await service.create_project(payload)
    return JSONResponse(
        status_code=201,
        content=envelope({"project": project.to_api()}, "Project created successfully"),
    )


@router.put("/{project_id}")
async def update_project(
    project_id: str,
    payload: UpdateProjectRequest,
    admin: AdminIdentity = Depends(require_admin),
    service: ProjectService = Depends(get_project_service),
):
    project = await service.update_project(project_id, payload)
    return envelope({"project": project.to_api()}, "Project updated successfully")


@router.delete("/{project_id}")
async def delete_project(
    project_id: str,
    admin: AdminIdentity = Depends(require_admin),
    service: ProjectService = Depends(get_project_service),
):
    await service.delete_project(project_id)
    return envelope(message="Project deleted successfully")
