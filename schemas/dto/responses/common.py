"""
Common response DTOs shared across endpoints.

Every JSON response uses the envelope ``{success, message?, data?, errors?}``.

ApiResponse     — the envelope itself (also the shape of AppError.to_dict())
HealthResponse  — GET /api/health
PaginationMeta  — pagination block included in list responses
"""

from __future__ import annotations

import math
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class FieldError(BaseModel):
    field: Optional[str] = None
    message: str


class ApiResponse(BaseModel):
    """Standard response envelope."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: Optional[str] = None
    data: Optional[Any] = None
    errors: Optional[list[FieldError]] = None


class HealthResponse(BaseModel):
    """Response body for GET /api/health."""

    status: str
    checks: dict[str, str]


class PaginationMeta(BaseModel):
    """Pagination metadata included in list responses."""

    model_config = ConfigDict(populate_by_name=True)

    page: int
    limit: int
    total: int
    pages: int = Field(default=0)

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PaginationMeta":
        return cls(page=page, limit=limit, total=total, pages=math.ceil(total / limit) if limit else 0)


def envelope(data: Any = None, message: Optional[str] = None) -> dict[str, Any]:
    """Success envelope with ``message`` / ``data`` only when present."""
    body: dict[str, Any] = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return body
