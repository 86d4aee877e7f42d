"""Ad document model for the `ads` collection."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from schemas.models.base import MongoBaseModel

AdStatus = Literal["draft", "active", "expired"]


class AdDoc(MongoBaseModel):
    """
    status is derived from start_date / end_date on every write, except that
    an explicit "draft" is kept as-is. clicks and impressions only ever move
    through atomic $inc updates.
    """

    title: str
    description: Optional[str] = None
    image: str
    link: str
    priority: int = Field(default=0, ge=0, le=100)
    start_date: datetime
    end_date: datetime
    status: AdStatus = "draft"
    clicks: int = 0
    impressions: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
