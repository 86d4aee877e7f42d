"""Repository for the `ads` collection."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from repositories.base import BaseRepository
from schemas.models.ad import AdDoc


class AdRepository(BaseRepository[AdDoc]):
    model = AdDoc

    async def list_ads(self, *, active_at: Optional[datetime] = None, limit: int = 100) -> list[AdDoc]:
        """Ads by priority desc then newest first.

        With *active_at*, only ads whose status is "active" and whose date
        bounds contain that instant are returned.
        """
        query = {}
        if active_at is not None:
            query = {
                "status": "active",
                "startDate": {"$lte": active_at},
                "endDate": {"$gte": active_at},
            }
        return await self.find_many(
            query, sort=[("priority", -1), ("createdAt", -1)], limit=limit
        )
