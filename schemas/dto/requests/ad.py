"""
Request DTOs for ad management.

CreateAdRequest — POST /api/ads
UpdateAdRequest — PUT  /api/ads/{id}   (partial; only provided fields change)
ListAdsQuery    — GET  /api/ads
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from shared.datetime_utils import parse_datetime


def _coerce_date(v: Any) -> Any:
    if v is None or isinstance(v, datetime):
        return v
    parsed = parse_datetime(v)
    if parsed is None:
        raise ValueError("Invalid date; use ISO 8601")
    return parsed


class CreateAdRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=500)
    image: str = Field(min_length=1)
    link: str = Field(min_length=1)
    priority: int = Field(default=0, ge=0, le=100)
    start_date: datetime = Field(alias="startDate")
    end_date: datetime = Field(alias="endDate")
    status: Literal["draft", "active", "expired"] = "draft"

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_dates(cls, v: Any) -> Any:
        return _coerce_date(v)


class UpdateAdRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=500)
    image: Optional[str] = Field(default=None, min_length=1)
    link: Optional[str] = Field(default=None, min_length=1)
    priority: Optional[int] = Field(default=None, ge=0, le=100)
    start_date: Optional[datetime] = Field(default=None, alias="startDate")
    end_date: Optional[datetime] = Field(default=None, alias="endDate")
    status: Optional[Literal["draft", "active", "expired"]] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_dates(cls, v: Any) -> Any:
        return _coerce_date(v)


class ListAdsQuery(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    active: Optional[bool] = None
    limit: int = Field(default=100, ge=1, le=100)
