"""
Request DTOs for lead capture and lead administration.

CreateLeadRequest — POST /api/leads/create   (public contact form)
UpdateLeadRequest — PUT  /api/leads/{id}     (admin review)
ListLeadsQuery    — GET  /api/leads          (admin list, query parameters)
"""

from __future__ import annotations

import re
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

EMAIL_RE = re.compile(r"^\S+@\S+\.\S+$")

LeadSortField = Literal["createdAt", "updatedAt", "name", "email", "status", "country", "page"]


class CreateLeadRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    name: str = Field(min_length=1)
    email: str = Field(min_length=1)
    message: str = Field(min_length=1)
    page: Optional[str] = None
    path: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.lower()
        if not EMAIL_RE.match(v):
            raise ValueError("Please provide a valid email")
        return v


class UpdateLeadRequest(BaseModel):
    """Only provided fields are applied; ``status`` is constrained to the lead lifecycle."""

    model_config = ConfigDict(populate_by_name=True)

    status: Optional[Literal["new", "contacted", "closed"]] = None
    notes: Optional[str] = None


class ListLeadsQuery(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    status: Optional[Literal["new", "contacted", "closed"]] = None
    search: Optional[str] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)
    sort_by: LeadSortField = Field(default="createdAt", alias="sortBy")
    sort_order: Literal["asc", "desc"] = Field(default="desc", alias="sortOrder")
