"""
Request DTOs for portfolio projects and service offerings.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from schemas.models.content import ServiceIcon
from shared.blog_utils import normalize_tags


class CreateProjectRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=1000)
    category: str = Field(min_length=1)
    image: str = Field(min_length=1)
    tags: list[str] = Field(default_factory=list)
    link: str = ""
    github: Optional[str] = None
    featured: bool = False
    is_custom_code: bool = Field(default=True, alias="isCustomCode")
    order: int = 0

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, v: Any) -> Any:
        return normalize_tags(v)


class UpdateProjectRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, min_length=1, max_length=1000)
    category: Optional[str] = Field(default=None, min_length=1)
    image: Optional[str] = Field(default=None, min_length=1)
    tags: Optional[list[str]] = None
    link: Optional[str] = None
    github: Optional[str] = None
    featured: Optional[bool] = None
    is_custom_code: Optional[bool] = Field(default=None, alias="isCustomCode")
    order: Optional[int] = None

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, v: Any) -> Any:
        return None if v is None else normalize_tags(v)


class ListProjectsQuery(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    featured: Optional[bool] = None
    is_custom_code: Optional[bool] = Field(default=None, alias="isCustomCode")
    category: Optional[str] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=100, ge=1, le=100)


class CreateServiceRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=500)
    icon: ServiceIcon = "Code"
    color: str = Field(default="from-blue-500 to-cyan-500", min_length=1)
    features: list[str] = Field(default_factory=list)
    price: str = "Custom"
    order: int = 0
    active: bool = True

    @field_validator("features", mode="before")
    @classmethod
    def split_features(cls, v: Any) -> Any:
        return normalize_tags(v, separators=",\n")


class UpdateServiceRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, min_length=1, max_length=500)
    icon: Optional[ServiceIcon] = None
    color: Optional[str] = Field(default=None, min_length=1)
    features: Optional[list[str]] = None
    price: Optional[str] = None
    order: Optional[int] = None
    active: Optional[bool] = None

    @field_validator("features", mode="before")
    @classmethod
    def split_features(cls, v: Any) -> Any:
        return None if v is None else normalize_tags(v, separators=",\n")


class ListServicesQuery(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Public listings only show active offerings unless asked otherwise
    active: bool = True
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=100, ge=1, le=100)
