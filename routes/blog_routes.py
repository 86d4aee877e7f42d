"""
Blog and comment endpoints.

Static paths (/categories, /validate-seo) are registered before /{slug} so
they are never captured as slugs.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from dependencies import get_blog_service, get_client, require_admin
from schemas.dto.requests.blog import (
    CreateBlogRequest,
    CreateCommentRequest,
    ListBlogsQuery,
    ListCommentsQuery,
    SeoValidationRequest,
    UpdateBlogRequest,
)
from schemas.dto.responses.common import envelope
from services.blog_service import BlogService, post_to_api
from shared.ip_utils import ClientContext
from shared.jwt_utils import AdminIdentity

router = APIRouter(prefix="/blog", tags=["blog"])

COMMENT_SUBMITTED = "Comment submitted"


# ── Public ───────────────────────────────────────────────────────────────────


@router.get("")
async def list_posts(
    query: Annotated[ListBlogsQuery, Query()],
    service: BlogService = Depends(get_blog_service),
):
    posts, pagination = await service.list_posts(query)
    return envelope({"posts": posts, "pagination": pagination.model_dump()})


@router.get("/categories")
async def categories(service: BlogService = Depends(get_blog_service)):
    return envelope(await service.categories())


@router.post("/validate-seo")
async def validate_seo(
    payload: SeoValidationRequest,
    admin: AdminIdentity = Depends(require_admin),
):
    return envelope(BlogService.validate_seo(payload.content))


@router.get("/{slug}/comments")
async def list_comments(
    slug: str,
    query: Annotated[ListCommentsQuery, Query()],
    service: BlogService = Depends(get_blog_service),
):
    return envelope(await service.list_comments(slug, query))


@router.post("/{slug}/comments")
async def add_comment(
    slug: str,
    payload: CreateCommentRequest,
    client: ClientContext = Depends(get_client),
    service: BlogService = Depends(get_blog_service),
):
    result = await service.add_comment(slug, payload, client)
    return JSONResponse(status_code=201, content=envelope(result, COMMENT_SUBMITTED))


@router.get("/{slug}")
async def get_post(slug: str, service: BlogService = Depends(get_blog_service)):
    return envelope({"post": await service.view_post(slug)})


# ── Admin ────────────────────────────────────────────────────────────────────


@router.post("")
async def create_post(
    payload: CreateBlogRequest,
    admin: AdminIdentity = Depends(require_admin),
    service: BlogService = Depends(get_blog_service),
):
    post = await service.create_post(payload)
    return JSONResponse(
        status_code=201,
        content=envelope({"post": post_to_api(post)}, "Blog post created successfully"),
    )


@router.put("/{post_id}")
async def update_post(
    post_id: str,
    payload: UpdateBlogRequest,
    admin: AdminIdentity = Depends(require_admin),
    service: BlogService = Depends(get_blog_service),
):
    post = await service.update_post(post_id, payload)
    return envelope({"post": post_to_api(post)}, "Blog post updated successfully")


@router.delete("/{post_id}")
async def delete_post(
    post_id: str,
    admin: AdminIdentity = Depends(require_admin),
    service: BlogService = Depends(get_blog_service),
):
    await service.delete_post(post_id)
    return envelope(message="Blog post deleted successfully")
