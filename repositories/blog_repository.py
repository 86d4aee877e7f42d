"""
Repositories for the blog collections.

  BlogRepository    → blogs
  CommentRepository → comments
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Optional

from bson import ObjectId
from pymongo import ReturnDocument

from repositories.base import BaseRepository
from schemas.models.blog import BlogDoc, CommentDoc

STATS_PROJECTION = {"commentsCount": 1, "ratingsCount": 1, "ratingsTotal": 1}
PUBLIC_COMMENT_PROJECTION = {"name": 1, "message": 1, "rating": 1, "createdAt": 1, "blog": 1}


def build_blog_query(
    published: Optional[bool] = None,
    category: Optional[str] = None,
    search: Optional[str] = None,
) -> dict[str, Any]:
    query: dict[str, Any] = {}
    if published is not None:
        query["published"] = published
    if category:
        query["category"] = category
    if search:
        escaped = re.escape(search)
        pattern = {"$regex": escaped, "$options": "i"}
        query["$or"] = [
            {"title": pattern},
            {"excerpt": pattern},
            {"tags": pattern},
        ]
    return query


class BlogRepository(BaseRepository[BlogDoc]):
    model = BlogDoc

    async def find_by_slug(self, slug: str) -> Optional[BlogDoc]:
        return await self.find_one({"slug": slug.lower()})

    async def slug_taken(self, slug: str, exclude_id: Optional[ObjectId] = None) -> bool:
        query: dict[str, Any] = {"slug": slug}
        if exclude_id is not None:
            query["_id"] = {"$ne": exclude_id}
        return await self._col.find_one(query, {"_id": 1}) is not None

    async def list_summaries(
        self, query: dict[str, Any], *, skip: int, limit: int
    ) -> list[BlogDoc]:
        """Newest posts first, without the content body."""
        return await self.find_many(
            query,
            sort=[("date", -1), ("createdAt", -1)],
            skip=skip,
            limit=limit,
            projection={"content": 0},
        )

    async def view_by_slug(self, slug: str) -> Optional[BlogDoc]:
        """Fetch a post and bump its view counter in the same atomic update."""
        doc = await self._col.find_one_and_update(
            {"slug": slug.lower()},
            {"$inc": {"views": 1}},
            return_document=ReturnDocument.AFTER,
        )
        return self.model.from_mongo(doc)

    async def publish_due(self, now: datetime) -> int:
        """Flip scheduled posts whose publish time has arrived to published."""
        result = await self._col.update_many(
            {"status": "scheduled", "publishedAt": {"$lte": now}},
            {"$set": {"status": "published", "published": True, "updatedAt": now}},
        )
        return result.modified_count

    async def record_comment(self, blog_id: ObjectId, rating: Optional[int]) -> Optional[dict[str, Any]]:
        """Atomically count a new comment (and rating) and return fresh stats."""
        inc: dict[str, int] = {"commentsCount": 1}
        if rating:
            inc["ratingsCount"] = 1
            inc["ratingsTotal"] = rating
        return await self._col.find_one_and_update(
            {"_id": blog_id},
            {"$inc": inc},
            projection=STATS_PROJECTION,
            return_document=ReturnDocument.AFTER,
        )

    async def categories_with_counts(self) -> list[dict[str, Any]]:
        pipeline = [
            {"$match": {"published": True}},
            {"$group": {"_id": "$category", "count": {"$sum": 1}}},
            {"$project": {"_id": 0, "name": "$_id", "count": 1}},
            {"$sort": {"count": -1, "name": 1}},
        ]
        return await self.aggregate(pipeline)


class CommentRepository(BaseRepository[CommentDoc]):
    model = CommentDoc

    async def list_approved(self, blog_id: ObjectId, *, skip: int, limit: int) -> list[CommentDoc]:
        return await self.find_many(
            {"blog": blog_id, "approved": True},
            sort=[("createdAt", -1)],
            skip=skip,
            limit=limit,
            projection=PUBLIC_COMMENT_PROJECTION,
        )

    async def count_approved(self, blog_id: ObjectId) -> int:
        return await self.count({"blog": blog_id, "approved": True})
