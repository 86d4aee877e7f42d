"""
Blog posts and their public comments.

Write-side rules:
- ``published`` and ``status`` are kept in agreement on every write.
- First publication without an explicit timestamp stamps ``publishedAt``.
- A "scheduled" post publishes at ``scheduledAt``; public reads first flip
  any scheduled post whose time has come to "published".
- ``readTime`` and ``tableOfContents`` are recomputed whenever content is
  written.

Engagement counters (views, comments, ratings) only change through atomic
``$inc`` updates; the rating average is derived at read time.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pymongo.errors import DuplicateKeyError

from errors import BusinessRuleError, DuplicateError, NotFoundError, ValidationError
from repositories.blog_repository import BlogRepository, CommentRepository, build_blog_query
from schemas.dto.requests.blog import (
    CreateBlogRequest,
    CreateCommentRequest,
    ListBlogsQuery,
    ListCommentsQuery,
    RobotsInput,
    UpdateBlogRequest,
)
from schemas.dto.responses.common import PaginationMeta
from schemas.models.blog import Author, BlogDoc, CommentDoc, Robots, TocEntry
from services.common import page_offset, require_object_id
from shared.blog_utils import (
    calculate_reading_time,
    generate_table_of_contents,
    ratings_average,
    validate_content_seo,
)
from shared.datetime_utils import utcnow
from shared.ip_utils import ClientContext
from shared.logging import get_logger

log = get_logger(__name__)

POST_NOT_FOUND = "Blog post not found"
DUPLICATE_SLUG = "Blog post with this slug already exists"
DEFAULT_READ_TIME = "5 min read"


def engagement_stats(doc: Any) -> dict[str, Any]:
    """Comment/rating stats from a BlogDoc or a raw stats projection."""
    if isinstance(doc, BlogDoc):
        comments, count, total = doc.comments_count, doc.ratings_count, doc.ratings_total
    else:
        doc = doc or {}
        comments = doc.get("commentsCount", 0)
        count = doc.get("ratingsCount", 0)
        total = doc.get("ratingsTotal", 0)
    return {
        "commentsCount": comments,
        "ratingsCount": count,
        "ratingsTotal": total,
        "ratingsAverage": ratings_average(total, count),
    }


def post_to_api(post: BlogDoc, *, summary: bool = False) -> dict[str, Any]:
    data = post.to_api(exclude={"content"} if summary else None)
    data["ratingsAverage"] = ratings_average(post.ratings_total, post.ratings_count)
    return data


def _normalize_robots(robots: Optional[RobotsInput]) -> Robots:
    if robots is None:
        return Robots()
    return Robots(
        index=robots.index if robots.index is not None else True,
        follow=robots.follow if robots.follow is not None else True,
    )


def _content_fields(content: str) -> dict[str, Any]:
    return {
        "read_time": calculate_reading_time(content),
        "table_of_contents": [TocEntry(**entry) for entry in generate_table_of_contents(content)],
    }


def _should_stamp(current: Optional[datetime], now: datetime) -> bool:
    # Unpublished or still-future timestamps move to "now" on publication
    return current is None or current > now


class BlogService:
    def __init__(self, blog_repo: BlogRepository, comment_repo: CommentRepository) -> None:
        self._blogs = blog_repo
        self._comments = comment_repo

    async def publish_due_posts(self) -> int:
        count = await self._blogs.publish_due(utcnow())
        if count:
            log.info("scheduled_posts_published", count=count)
        return count

    # ── Reads ────────────────────────────────────────────────────────────────

    async def list_posts(self, query: ListBlogsQuery) -> tuple[list[dict[str, Any]], PaginationMeta]:
        await self.publish_due_posts()
        mongo_query = build_blog_query(query.published, query.category, query.search)
        posts = await self._blogs.list_summaries(
            mongo_query, skip=page_offset(query.page, query.limit), limit=query.limit
        )
        total = await self._blogs.count(mongo_query)
        return (
            [post_to_api(post, summary=True) for post in posts],
            PaginationMeta.build(query.page, query.limit, total),
        )

    async def categories(self) -> dict[str, Any]:
        await self.publish_due_posts()
        with_counts = await self._blogs.categories_with_counts()
        return {
            "categories": [c["name"] for c in with_counts],
            "categoriesWithCounts": with_counts,
        }

    async def view_post(self, slug: str) -> dict[str, Any]:
        """Fetch a post by slug, counting the read as a view."""
        await self.publish_due_posts()
        post = await self._blogs.view_by_slug(slug)
        if post is None:
            raise NotFoundError(POST_NOT_FOUND)
        return post_to_api(post)

    @staticmethod
    def validate_seo(content: str) -> dict[str, list[str]]:
        return validate_content_seo(content)

    # ── Writes ───────────────────────────────────────────────────────────────

    async def create_post(self, payload: CreateBlogRequest) -> BlogDoc:
        if await self._blogs.slug_taken(payload.slug):
            raise DuplicateError(DUPLICATE_SLUG, field="slug")

        now = utcnow()
        status = payload.status or ("published" if payload.published else "draft")
        published_at = payload.published_at
        if status == "published" and published_at is None:
            published_at = now
        if status == "scheduled":
            published_at = payload.scheduled_at or published_at
            if published_at is None:
                raise ValidationError("scheduledAt is required for scheduled posts", field="scheduledAt")

        data = payload.model_dump(exclude_none=True, exclude={"robots", "author"})
        data.update(
            status=status,
            published=status == "published",
            published_at=published_at,
            robots=_normalize_robots(payload.robots),
            author=Author(**payload.author.model_dump(exclude_none=True)) if payload.author else Author(),
            date=payload.date or now,
            created_at=now,
            updated_at=now,
            **_content_fields(payload.content),
        )
        if payload.read_time and payload.read_time != DEFAULT_READ_TIME:
            data["read_time"] = payload.read_time

        post = BlogDoc(**data)
        try:
            post.id = await self._blogs.insert(post)
        except DuplicateKeyError:
            raise DuplicateError(DUPLICATE_SLUG, field="slug")
        log.info("blog_post_created", post_id=str(post.id), slug=post.slug, status=post.status)
        return post

    async def update_post(self, post_id: str, payload: UpdateBlogRequest) -> BlogDoc:
        oid = require_object_id(post_id, POST_NOT_FOUND)
        existing = await self._blogs.find_by_id(oid)
        if existing is None:
            raise NotFoundError(POST_NOT_FOUND)

        changes = payload.model_dump(exclude_unset=True, exclude_none=True, exclude={"robots", "author"})
        if "slug" in changes and await self._blogs.slug_taken(changes["slug"], exclude_id=oid):
            raise DuplicateError(DUPLICATE_SLUG, field="slug")

        now = utcnow()
        if payload.content is not None:
            changes.update(_content_fields(payload.content))

        status = changes.get("status")
        if status is None and "published" in changes:
            status = "published" if changes["published"] else "draft"
        if status is not None:
            changes["status"] = status
            changes["published"] = status == "published"
            if status == "published" and "published_at" not in changes:
                if _should_stamp(existing.published_at, now):
                    changes["published_at"] = now
            if status == "scheduled":
                scheduled = changes.get("scheduled_at") or existing.scheduled_at
                publish_at = scheduled or changes.get("published_at") or existing.published_at
                if publish_at is None:
                    raise ValidationError("scheduledAt is required for scheduled posts", field="scheduledAt")
                changes["published_at"] = publish_at

        if payload.robots is not None:
            changes["robots"] = _normalize_robots(payload.robots)
        if payload.author is not None:
            changes["author"] = existing.author.model_copy(
                update=payload.author.model_dump(exclude_none=True)
            )
        changes["updated_at"] = now

        merged = BlogDoc.model_validate({**existing.model_dump(), **changes})
        fields = merged.model_dump(by_alias=True, include=set(changes))
        try:
            post = await self._blogs.update_by_id(oid, {"$set": fields})
        except DuplicateKeyError:
            raise DuplicateError(DUPLICATE_SLUG, field="slug")
        if post is None:
            raise NotFoundError(POST_NOT_FOUND)
        log.info("blog_post_updated", post_id=post_id, status=post.status)
        return post

    async def delete_post(self, post_id: str) -> None:
        if not await self._blogs.delete_by_id(require_object_id(post_id, POST_NOT_FOUND)):
            raise NotFoundError(POST_NOT_FOUND)
        log.info("blog_post_deleted", post_id=post_id)

    # ── Comments ─────────────────────────────────────────────────────────────

    async def _published_post(self, slug: str) -> BlogDoc:
        await self.publish_due_posts()
        post = await self._blogs.find_by_slug(slug)
        if post is None or not post.published:
            raise NotFoundError(POST_NOT_FOUND)
        return post

    async def list_comments(self, slug: str, query: ListCommentsQuery) -> dict[str, Any]:
        post = await self._published_post(slug)
        comments = await self._comments.list_approved(
            post.id, skip=page_offset(query.page, query.limit), limit=query.limit
        )
        total = await self._comments.count_approved(post.id)
        return {
            "comments": [comment.to_public() for comment in comments],
            "stats": engagement_stats(post),
            "pagination": PaginationMeta.build(query.page, query.limit, total).model_dump(),
        }

    async def add_comment(
        self, slug: str, payload: CreateCommentRequest, client: ClientContext
    ) -> Optional[dict[str, Any]]:
        """Store a public comment and return it with refreshed stats.

        Returns None for honeypot submissions, which are acknowledged but
        never stored.
        """
        if payload.website:
            log.info("comment_honeypot_triggered", slug=slug)
            return None

        post = await self._published_post(slug)
        if not post.allow_comments:
            raise BusinessRuleError("Comments are disabled for this post")

        now = utcnow()
        comment = CommentDoc(
            blog=post.id,
            name=payload.name,
            email=payload.email,
            message=payload.message,
            rating=payload.rating,
            approved=True,
            ip=client.ip,
            user_agent=client.user_agent,
            created_at=now,
            updated_at=now,
        )
        comment.id = await self._comments.insert(comment)
        stats = await self._blogs.record_comment(post.id, payload.rating)
        log.info("comment_created", slug=slug, comment_id=str(comment.id), rated=payload.rating is not None)
        return {"comment": comment.to_public(), "stats": engagement_stats(stats)}
