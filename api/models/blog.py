"""Blog post data models."""

from datetime import datetime
from typing import Literal

from api.models.common import CamelModel, CountStats

BlogStatus = Literal["draft", "published"]


class BlogPost(CamelModel):
    """A stored blog post."""

    id: str
    title: str
    excerpt: str = ""
    content: str = ""
    author: str = ""
    tags: list[str] = []
    slug: str
    cover_image: str | None = None
    status: BlogStatus = "draft"
    published_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class BlogPostCreate(CamelModel):
    """Admin create payload.

    Field constraints live in ``api.services.validation``; types here are
    kept loose so violations come back as named field errors.
    """

    title: str = ""
    excerpt: str = ""
    content: str = ""
    author: str = ""
    tags: list[str] = []
    cover_image: str | None = None
    status: str = "draft"
    published_at: datetime | None = None


class BlogPostUpdate(CamelModel):
    """Partial update payload; only fields that were sent are applied.

    The slug is derived once at creation and cannot be changed here.
    """

    title: str | None = None
    excerpt: str | None = None
    content: str | None = None
    author: str | None = None
    tags: list[str] | None = None
    cover_image: str | None = None
    status: str | None = None
    published_at: datetime | None = None


class BlogStats(CountStats):
    """Blog counts for the admin dashboard."""

    published: int = 0
