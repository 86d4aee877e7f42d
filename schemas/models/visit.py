"""
Tracking document models.

  VisitDoc → visits  (one per tracked page load, immutable)
  EventDoc → events  (one per tracked custom action, immutable)

Neither model carries the client IP; it is used only transiently for
geolocation and session derivation.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from schemas.models.base import MongoBaseModel


class VisitDoc(MongoBaseModel):
    page: str
    path: str
    session_id: str
    is_unique: bool = False
    device: str = "unknown"
    browser: str = "unknown"
    os: str = "unknown"
    user_agent: str = ""
    referrer: str = "direct"
    referrer_domain: Optional[str] = None
    country: str = "Unknown"
    country_code: str = "XX"
    city: str = "Unknown"
    region: str = "Unknown"
    timestamp: datetime
    do_not_track: bool = False


class EventDoc(MongoBaseModel):
    event_name: str
    page: str
    path: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    session_id: str
    country: str = "Unknown"
    country_code: str = "XX"
    timestamp: datetime
