"""
Shared repository plumbing over pymongo's async collections.

Each repository owns one collection and the query shapes used against it;
services never build MongoDB filters themselves. Storage errors propagate
to the global error handler.
"""

from __future__ import annotations

from typing import Any, Generic, Optional, TypeVar

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.asynchronous.collection import AsyncCollection

from schemas.models.base import MongoBaseModel

T = TypeVar("T", bound=MongoBaseModel)

SortSpec = list[tuple[str, int]]


class BaseRepository(Generic[T]):
    model: type[T]

    def __init__(self, collection: AsyncCollection) -> None:
        self._col = collection

    async def insert(self, doc: T) -> ObjectId:
        result = await self._col.insert_one(doc.to_mongo())
        return result.inserted_id

    async def find_by_id(self, doc_id: ObjectId) -> Optional[T]:
        return self.model.from_mongo(await self._col.find_one({"_id": doc_id}))

    async def find_one(self, query: dict[str, Any]) -> Optional[T]:
        return self.model.from_mongo(await self._col.find_one(query))

    async def find_many(
        self,
        query: dict[str, Any],
        *,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: int = 0,
        projection: Optional[dict[str, Any]] = None,
    ) -> list[T]:
        cursor = self._col.find(query, projection)
        if sort:
            cursor = cursor.sort(sort)
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        docs = await cursor.to_list(length=None)
        return [self.model.from_mongo(doc) for doc in docs]

    async def count(self, query: dict[str, Any]) -> int:
        return await self._col.count_documents(query)

    async def update_by_id(
        self, doc_id: ObjectId, update: dict[str, Any] | list[dict[str, Any]]
    ) -> Optional[T]:
        """Apply *update* and return the updated document (None if missing)."""
        doc = await self._col.find_one_and_update(
            {"_id": doc_id}, update, return_document=ReturnDocument.AFTER
        )
        return self.model.from_mongo(doc)

    async def delete_by_id(self, doc_id: ObjectId) -> bool:
        result = await self._col.delete_one({"_id": doc_id})
        return result.deleted_count > 0

    async def increment(self, doc_id: ObjectId, field: str, amount: int = 1) -> bool:
        """Atomically bump a counter field; False when the document is missing."""
        result = await self._col.update_one({"_id": doc_id}, {"$inc": {field: amount}})
        return result.matched_count > 0

    async def aggregate(self, pipeline: list[dict[str, Any]]) -> list[dict[str, Any]]:
        cursor = await self._col.aggregate(pipeline)
        return await cursor.to_list(length=None)


def window_filter(
    field: str, start: Optional[Any] = None, end: Optional[Any] = None
) -> dict[str, Any]:
    """``{field: {$gte: start, $lt: end}}`` with absent bounds left open."""
    bounds: dict[str, Any] = {}
    if start is not None:
        bounds["$gte"] = start
    if end is not None:
        bounds["$lt"] = end
    return {field: bounds} if bounds else {}
