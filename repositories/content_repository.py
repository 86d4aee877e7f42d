"""
Repositories for portfolio content.

  ProjectRepository → projects
  ServiceRepository → services
"""

from __future__ import annotations

from typing import Any

from repositories.base import BaseRepository
from schemas.models.content import ProjectDoc, ServiceDoc


class ProjectRepository(BaseRepository[ProjectDoc]):
    model = ProjectDoc

    async def list_projects(self, query: dict[str, Any], *, skip: int, limit: int) -> list[ProjectDoc]:
        """Featured first, then manual order, then newest."""
        return await self.find_many(
            query,
            sort=[("featured", -1), ("order", 1), ("createdAt", -1)],
            skip=skip,
            limit=limit,
        )


class ServiceRepository(BaseRepository[ServiceDoc]):
    model = ServiceDoc

    async def list_services(self, query: dict[str, Any], *, skip: int, limit: int) -> list[ServiceDoc]:
        return await self.find_many(
            query, sort=[("order", 1), ("createdAt", -1)], skip=skip, limit=limit
        )
