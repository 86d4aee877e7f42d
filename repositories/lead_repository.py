"""Repository for the `leads` collection."""

from __future__ import annotations

import re
from typing import Any, Optional

from bson import ObjectId

from repositories.base import BaseRepository
from schemas.models.lead import LeadDoc

EXPORT_LEAD_PROJECTION = {
    "name": 1,
    "email": 1,
    "message": 1,
    "page": 1,
    "country": 1,
    "status": 1,
    "createdAt": 1,
}


def build_lead_query(status: Optional[str] = None, search: Optional[str] = None) -> dict[str, Any]:
    """Status filter plus case-insensitive literal search over name/email/message."""
    query: dict[str, Any] = {}
    if status:
        query["status"] = status
    if search:
        pattern = {"$regex": re.escape(search), "$options": "i"}
        query["$or"] = [{"name": pattern}, {"email": pattern}, {"message": pattern}]
    return query


class LeadRepository(BaseRepository[LeadDoc]):
    model = LeadDoc

    async def update_review(
        self,
        lead_id: ObjectId,
        *,
        fields: dict[str, Any],
        contacted_by: Any = None,
        now: Any = None,
    ) -> Optional[LeadDoc]:
        """Apply admin review changes in one atomic update.

        When *contacted_by* is given (a move to "contacted"), contactedAt and
        contactedBy are stamped only if contactedAt is still unset, so a
        lead is never re-stamped by later updates.
        """
        # Pipeline stages read "$"-prefixed strings as field paths
        stage: dict[str, Any] = {key: {"$literal": value} for key, value in fields.items()}
        if contacted_by is not None:
            stage["contactedAt"] = {"$ifNull": ["$contactedAt", now]}
            stage["contactedBy"] = {
                "$cond": [
                    {"$eq": [{"$ifNull": ["$contactedAt", None]}, None]},
                    {"$literal": contacted_by},
                    "$contactedBy",
                ]
            }
        if not stage:
            return await self.find_by_id(lead_id)
        return await self.update_by_id(lead_id, [{"$set": stage}])

    async def for_export(self, match: dict[str, Any]) -> list[dict[str, Any]]:
        cursor = self._col.find(match, EXPORT_LEAD_PROJECTION).sort([("createdAt", -1)])
        return await cursor.to_list(length=None)
