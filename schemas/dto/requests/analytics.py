"""
Request DTOs for the admin analytics endpoints (query parameters).

All analytics reads share a ``[startDate, endDate)`` window. Either bound may
be omitted. A date-only ``endDate`` (``YYYY-MM-DD``) covers that whole day.
Unparsable values fail validation and surface as a 400.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from shared.datetime_utils import parse_datetime, parse_window_end


class DateWindowQuery(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    start_date: Optional[datetime] = Field(default=None, alias="startDate")
    end_date: Optional[datetime] = Field(default=None, alias="endDate")

    @field_validator("start_date", mode="before")
    @classmethod
    def parse_start(cls, v: Any) -> Optional[datetime]:
        if v is None or v == "":
            return None
        parsed = parse_datetime(v)
        if parsed is None:
            raise ValueError("Invalid startDate; use ISO 8601")
        return parsed

    @field_validator("end_date", mode="before")
    @classmethod
    def parse_end(cls, v: Any) -> Optional[datetime]:
        if v is None or v == "":
            return None
        parsed = parse_window_end(v)
        if parsed is None:
            raise ValueError("Invalid endDate; use ISO 8601")
        return parsed


class TrafficQuery(DateWindowQuery):
    period: Literal["daily", "monthly"] = "daily"


class TopItemsQuery(DateWindowQuery):
    limit: int = Field(default=10, ge=1, le=100)


class RecentVisitsQuery(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    limit: int = Field(default=20, ge=1, le=100)
