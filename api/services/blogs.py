"""Blog post operations on top of the record store."""

import logging
from typing import Any

from api.errors import RecordNotFoundError
from api.models.blog import BlogPost, BlogStats
from api.models.common import Page
from api.services.pagination import DEFAULT_PAGE_SIZE, fetch_page
from api.services.record_store import ContainerNotFoundError, get_blog_store
from api.services.slug import slugify
from api.services.validation import validate_blog_post

logger = logging.getLogger(__name__)

KIND = "blog post"


async def create_blog(data: dict[str, Any]) -> BlogPost:
    """Validate and store a new blog post.

    Args:
        data: Post fields in wire form, without id, slug or timestamps.
    """
    validate_blog_post(data).raise_for_errors()
    record = {k: v for k, v in data.items() if k != "id"}
    record["slug"] = slugify(data["title"])
    stored = await get_blog_store().create(record)
    return BlogPost.model_validate(stored)


async def get_blog(post_id: str) -> BlogPost | None:
    record = await get_blog_store().get_by_id(post_id)
    return BlogPost.model_validate(record) if record else None


async def get_blog_by_slug(slug: str) -> BlogPost | None:
    """Look up a post by slug.

    Slugs are not unique. When several posts share one, the earliest
    created wins (ties broken by id) and the duplicates are logged.
    """
    matches = await get_blog_store().get_by_index("slug", slug)
    if not matches:
        return None
    matches.sort(key=lambda r: (r.get("createdAt", ""), r.get("id", "")))
    if len(matches) > 1:
        logger.warning(
            "Slug %r shared by %d posts (%s); serving %s",
            slug,
            len(matches),
            ", ".join(r["id"] for r in matches),
            matches[0]["id"],
        )
    return BlogPost.model_validate(matches[0])


async def list_blogs(
    status: str | None = None,
    limit: int = DEFAULT_PAGE_SIZE,
    next_token: str | None = None,
) -> Page[BlogPost]:
    """List one page of posts, optionally filtered by status."""
    records, metadata = await fetch_page(
        get_blog_store(),
        limit=limit,
        cursor=next_token,
        where={"status": status} if status else None,
    )
    return Page[BlogPost](
        items=[BlogPost.model_validate(r) for r in records], metadata=metadata
    )


async def update_blog(post_id: str, fields: dict[str, Any]) -> BlogPost:
    """Apply a partial update. The slug is never regenerated.

    Raises:
        RecordNotFoundError: if the post does not exist.
        RecordValidationError: if the merged post violates a constraint.
    """
    store = get_blog_store()
    existing = await store.get_by_id(post_id)
    if existing is None:
        raise RecordNotFoundError(KIND, post_id)
    validate_blog_post({**existing, **fields}).raise_for_errors()
    stored = await store.update(post_id, fields)
    return BlogPost.model_validate(stored)


async def delete_blog(post_id: str) -> None:
    await get_blog_store().delete(post_id)


async def get_blog_stats() -> BlogStats:
    """Count all posts and published posts with a full scan."""
    try:
        records = await get_blog_store().scan()
    except ContainerNotFoundError:
        logger.info("Blog container not found, returning zero counts")
        return BlogStats()
    return BlogStats(
        total=len(records),
        published=sum(1 for r in records if r.get("status") == "published"),
    )
