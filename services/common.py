"""Helpers shared by the service layer."""

from __future__ import annotations

from typing import Any

from bson import ObjectId

from errors import NotFoundError
from schemas.models.base import parse_object_id


def require_object_id(value: Any, not_found_message: str) -> ObjectId:
    """Parse a path id; malformed ids are reported as not found."""
    oid = parse_object_id(value)
    if oid is None:
        raise NotFoundError(not_found_message)
    return oid


def page_offset(page: int, limit: int) -> int:
    return (page - 1) * limit
