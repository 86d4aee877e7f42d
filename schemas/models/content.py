"""
Portfolio content document models.

  ProjectDoc → projects
  ServiceDoc → services  (the offerings listed on the site)
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from schemas.models.base import MongoBaseModel

ServiceIcon = Literal["Code", "Globe", "Palette", "Database", "Mobile", "Cloud"]


class ProjectDoc(MongoBaseModel):
    title: str
    description: str
    category: str
    image: str
    tags: list[str] = Field(default_factory=list)
    link: str = ""
    github: Optional[str] = None
    featured: bool = False
    is_custom_code: bool = True
    order: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ServiceDoc(MongoBaseModel):
    title: str
    description: str
    icon: ServiceIcon = "Code"
    color: str = "from-blue-500 to-cyan-500"
    features: list[str] = Field(default_factory=list)
    price: str = "Custom"
    order: int = 0
    active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
