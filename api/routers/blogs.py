"""Blog post endpoints."""

import logging
from datetime import datetime, timezone
from typing import Any, Literal

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Query, Response

from api.dependencies import require_admin
from api.models.auth import AdminUser
from api.models.blog import BlogPost, BlogPostCreate, BlogPostUpdate, BlogStats
from api.models.common import Page
from api.services.blogs import (
    create_blog,
    delete_blog,
    get_blog,
    get_blog_by_slug,
    get_blog_stats,
    list_blogs,
    update_blog,
)
from api.services.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, PUBLIC_PAGE_SIZE
from api.services.validation import validate_blog_post

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/blogs", tags=["blogs"])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@router.get("", response_model=Page[BlogPost])
async def list_blog_posts(
    status: Literal["draft", "published"] | None = Query(default=None),
    limit: int | None = Query(default=None, ge=1, le=MAX_PAGE_SIZE),
    next_token: str | None = Query(default=None, alias="nextToken"),
):
    """List one page of posts, continuing from ``nextToken`` when given."""
    if limit is None:
        limit = PUBLIC_PAGE_SIZE if status == "published" else DEFAULT_PAGE_SIZE
    return await list_blogs(status=status, limit=limit, next_token=next_token)


@router.post("", response_model=BlogPost)
async def add_blog_post(
    post: BlogPostCreate, admin: AdminUser = Depends(require_admin)
):
    """Create a blog post. The slug is derived from the title."""
    data = post.model_dump(by_alias=True, mode="json")
    if data["status"] == "published" and not data.get("publishedAt"):
        data["publishedAt"] = _now()
    created = await create_blog(data)
    logger.info(
        "%s created blog post %s (%s)", admin.username, created.id, created.slug
    )
    return created


@router.post("/validate")
async def validate_blog_post_fields(data: dict[str, Any] = Body(...)):
    """Check post fields without saving, for early form feedback."""
    return validate_blog_post(data).to_dict()


@router.get("/stats", response_model=BlogStats)
async def blog_stats(admin: AdminUser = Depends(require_admin)):
    """Total and published post counts."""
    return await get_blog_stats()


@router.get("/slug/{slug}", response_model=BlogPost)
async def get_blog_post_by_slug(slug: str = Path(..., max_length=200)):
    """Get a single blog post by its slug."""
    post = await get_blog_by_slug(slug)
    if not post:
        raise HTTPException(status_code=404, detail="Blog post not found")
    return post


@router.get("/{post_id}", response_model=BlogPost)
async def get_blog_post(post_id: str = Path(..., max_length=200)):
    """Get a single blog post by ID."""
    post = await get_blog(post_id)
    if not post:
        raise HTTPException(status_code=404, detail="Blog post not found")
    return post


@router.put("/{post_id}", response_model=BlogPost)
async def edit_blog_post(
    changes: BlogPostUpdate,
    post_id: str = Path(..., max_length=200),
    admin: AdminUser = Depends(require_admin),
):
    """Apply a partial update to a blog post.

    Publishing a post that has never been published stamps ``publishedAt``
    unless the request supplies one.
    """
    fields = changes.model_dump(by_alias=True, mode="json", exclude_unset=True)
    if fields.get("status") == "published" and "publishedAt" not in fields:
        existing = await get_blog(post_id)
        if existing is not None and existing.published_at is None:
            fields["publishedAt"] = _now()
    updated = await update_blog(post_id, fields)
    logger.info("%s updated blog post %s", admin.username, post_id)
    return updated


@router.delete("/{post_id}", status_code=204)
async def remove_blog_post(
    post_id: str = Path(..., max_length=200),
    admin: AdminUser = Depends(require_admin),
):
    """Delete a blog post. Deleting a missing post still succeeds."""
    await delete_blog(post_id)
    logger.info("%s deleted blog post %s", admin.username, post_id)
    return Response(status_code=204)
