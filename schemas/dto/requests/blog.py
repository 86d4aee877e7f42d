"""
Request DTOs for blog posts and comments.

CreateBlogRequest     — POST /api/blog
UpdateBlogRequest     — PUT  /api/blog/{id}  (partial)
ListBlogsQuery        — GET  /api/blog
SeoValidationRequest  — POST /api/blog/validate-seo
ListCommentsQuery     — GET  /api/blog/{slug}/comments
CreateCommentRequest  — POST /api/blog/{slug}/comments
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from schemas.dto.requests.lead import EMAIL_RE
from shared.blog_utils import normalize_tags
from shared.datetime_utils import parse_datetime


def _coerce_optional_date(v: Any) -> Any:
    if v is None or v == "" or isinstance(v, datetime):
        return v or None
    parsed = parse_datetime(v)
    if parsed is None:
        raise ValueError("Invalid date; use ISO 8601")
    return parsed


class RobotsInput(BaseModel):
    index: Optional[bool] = None
    follow: Optional[bool] = None


class AuthorInput(BaseModel):
    name: Optional[str] = None
    bio: Optional[str] = None
    image: Optional[str] = None


class _BlogFields(BaseModel):
    """Optional fields shared by create and update."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    tags: Optional[list[str]] = None
    read_time: Optional[str] = Field(default=None, alias="readTime")
    date: Optional[datetime] = None
    image: Optional[str] = None
    image_alt: Optional[str] = Field(default=None, alias="imageAlt")
    link: Optional[str] = None
    author: Optional[AuthorInput] = None
    published: Optional[bool] = None
    status: Optional[Literal["draft", "published", "scheduled"]] = None
    published_at: Optional[datetime] = Field(default=None, alias="publishedAt")
    scheduled_at: Optional[datetime] = Field(default=None, alias="scheduledAt")

    seo_title: Optional[str] = Field(default=None, max_length=60, alias="seoTitle")
    meta_description: Optional[str] = Field(default=None, max_length=160, alias="metaDescription")
    focus_keyword: Optional[str] = Field(default=None, alias="focusKeyword")
    canonical_url: Optional[str] = Field(default=None, alias="canonicalUrl")
    robots: Optional[RobotsInput] = None
    og_title: Optional[str] = Field(default=None, alias="ogTitle")
    og_description: Optional[str] = Field(default=None, alias="ogDescription")
    og_image: Optional[str] = Field(default=None, alias="ogImage")
    twitter_card: Optional[Literal["summary", "summary_large_image"]] = Field(
        default=None, alias="twitterCard"
    )
    schema_type: Optional[Literal["BlogPosting", "Article"]] = Field(default=None, alias="schemaType")
    breadcrumbs_enabled: Optional[bool] = Field(default=None, alias="breadcrumbsEnabled")
    featured: Optional[bool] = None
    allow_comments: Optional[bool] = Field(default=None, alias="allowComments")

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, v: Any) -> Any:
        if v is None:
            return None
        return normalize_tags(v)

    @field_validator("date", "published_at", "scheduled_at", mode="before")
    @classmethod
    def parse_dates(cls, v: Any) -> Any:
        return _coerce_optional_date(v)


class CreateBlogRequest(_BlogFields):
    title: str = Field(min_length=1, max_length=200)
    slug: str = Field(min_length=1)
    excerpt: str = Field(min_length=1, max_length=500)
    content: str = Field(min_length=1)
    category: str = Field(min_length=1)

    @field_validator("slug")
    @classmethod
    def lowercase_slug(cls, v: str) -> str:
        return v.lower()


class UpdateBlogRequest(_BlogFields):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    slug: Optional[str] = Field(default=None, min_length=1)
    excerpt: Optional[str] = Field(default=None, min_length=1, max_length=500)
    content: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = Field(default=None, min_length=1)

    @field_validator("slug")
    @classmethod
    def lowercase_slug(cls, v: Optional[str]) -> Optional[str]:
        return v.lower() if v is not None else v


class ListBlogsQuery(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    published: Optional[bool] = None
    category: Optional[str] = None
    search: Optional[str] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)


class SeoValidationRequest(BaseModel):
    content: str = Field(min_length=1)


class ListCommentsQuery(BaseModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=50)


class CreateCommentRequest(BaseModel):
    """Public comment form. ``website`` is a honeypot that humans leave empty."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    name: str = Field(min_length=2, max_length=80)
    message: str = Field(min_length=5, max_length=2000)
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    email: Optional[str] = None
    website: Optional[str] = Field(default=None, max_length=200)

    @field_validator("rating", mode="before")
    @classmethod
    def blank_rating(cls, v: Any) -> Any:
        return None if v == "" else v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        v = v.lower()
        if not EMAIL_RE.match(v):
            raise ValueError("Please provide a valid email")
        return v
