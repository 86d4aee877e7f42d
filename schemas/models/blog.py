"""
Blog document models.

  BlogDoc    → blogs     (slug unique and lowercase)
  CommentDoc → comments  (email, ip and user_agent are write-only)
"""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.models.base import MongoBaseModel, PyObjectId

BlogStatus = Literal["draft", "published", "scheduled"]

DEFAULT_AUTHOR_NAME = "Sayed Safi"
DEFAULT_AUTHOR_BIO = "Full-Stack Web Developer specializing in modern web technologies"
DEFAULT_AUTHOR_IMAGE = "/api/placeholder/100/100"


class _SubDocument(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Author(_SubDocument):
    name: str = DEFAULT_AUTHOR_NAME
    bio: str = DEFAULT_AUTHOR_BIO
    image: str = DEFAULT_AUTHOR_IMAGE


class Robots(_SubDocument):
    index: bool = True
    follow: bool = True


class TocEntry(_SubDocument):
    id: str
    text: str
    level: int


class BlogDoc(MongoBaseModel):
    """
    published and status always agree (published ⇔ status == "published").
    read_time and table_of_contents are recomputed whenever content is
    written. views, comments_count, ratings_count and ratings_total only
    move through atomic $inc updates; the rating average is derived at read
    time.
    """

    slug: str
    title: str
    excerpt: str
    content: Optional[str] = None
    date: Optional[datetime] = None
    read_time: str = "5 min read"
    category: str
    image: str = "/api/placeholder/1200/630"
    image_alt: str = ""
    link: str = ""
    tags: list[str] = Field(default_factory=list)
    author: Author = Field(default_factory=Author)
    published: bool = True
    status: BlogStatus = "published"
    published_at: Optional[datetime] = None
    scheduled_at: Optional[datetime] = None

    # SEO
    seo_title: Optional[str] = None
    meta_description: Optional[str] = None
    focus_keyword: Optional[str] = None
    canonical_url: Optional[str] = None
    robots: Robots = Field(default_factory=Robots)
    og_title: Optional[str] = None
    og_description: Optional[str] = None
    og_image: Optional[str] = None
    twitter_card: Literal["summary", "summary_large_image"] = "summary_large_image"
    schema_type: Literal["BlogPosting", "Article"] = "BlogPosting"
    breadcrumbs_enabled: bool = True

    featured: bool = False
    allow_comments: bool = True
    table_of_contents: list[TocEntry] = Field(default_factory=list)

    views: int = 0
    comments_count: int = 0
    ratings_count: int = 0
    ratings_total: int = 0

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CommentDoc(MongoBaseModel):
    blog: PyObjectId
    name: str
    email: Optional[str] = None
    message: str
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    approved: bool = True
    ip: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    # Fields never returned to public clients
    PRIVATE_FIELDS: ClassVar[set[str]] = {"email", "ip", "user_agent", "blog", "approved", "updated_at"}

    def to_public(self) -> dict:
        return self.to_api(exclude=self.PRIVATE_FIELDS)
