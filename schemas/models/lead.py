"""Lead document model for the `leads` collection."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional

from bson import ObjectId
from pydantic import field_validator

from schemas.models.base import MongoBaseModel

LeadStatus = Literal["new", "contacted", "closed"]
LEAD_STATUSES = ("new", "contacted", "closed")


class LeadDoc(MongoBaseModel):
    """
    status moves between new | contacted | closed under admin review.
    contacted_at / contacted_by are stamped on the first move to
    "contacted" and left untouched afterwards.
    """

    name: str
    email: str
    message: str
    page: str = "contact"
    path: str = "/contact"
    country: str = "Unknown"
    country_code: str = "XX"
    status: LeadStatus = "new"
    notes: Optional[str] = None
    contacted_at: Optional[datetime] = None
    contacted_by: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    @field_validator("contacted_by", mode="before")
    @classmethod
    def _stringify_admin_id(cls, v: Any) -> Any:
        # Stored as an ObjectId when the admin id is one, exposed as a string
        if isinstance(v, ObjectId):
            return str(v)
        return v
