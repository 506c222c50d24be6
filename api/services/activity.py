"""Recent admin activity across projects and blog posts."""

import logging
from typing import Any

from api.models.activity import ActivityItem
from api.services.record_store import (
    ContainerNotFoundError,
    RecordStore,
    get_blog_store,
    get_project_store,
)

logger = logging.getLogger(__name__)

MAX_ACTIVITY_ITEMS = 20


async def _safe_scan(store: RecordStore) -> list[dict[str, Any]]:
    """Scan a store, treating a missing container as empty."""
    try:
        return await store.scan()
    except ContainerNotFoundError:
        logger.info("%s container not found, returning empty list", store.kind)
        return []


def _project_activity(record: dict[str, Any]) -> ActivityItem:
    return ActivityItem(
        id=f"project-{record['id']}",
        type="project",
        action=(
            "Project started"
            if record.get("status") == "ongoing"
            else "Project completed"
        ),
        title=record.get("title", ""),
        timestamp=record.get("updatedAt") or record["createdAt"],
    )


def _blog_activity(record: dict[str, Any]) -> ActivityItem:
    return ActivityItem(
        id=f"blog-{record['id']}",
        type="blog",
        action=(
            "Post published" if record.get("status") == "published" else "Post drafted"
        ),
        title=record.get("title", ""),
        timestamp=record.get("updatedAt") or record["createdAt"],
    )


async def get_recent_activity(limit: int = MAX_ACTIVITY_ITEMS) -> list[ActivityItem]:
    """Return the most recently changed projects and posts, newest first."""
    projects = await _safe_scan(get_project_store())
    posts = await _safe_scan(get_blog_store())
    activities = [_project_activity(r) for r in projects]
    activities.extend(_blog_activity(r) for r in posts)
    activities.sort(key=lambda a: a.timestamp, reverse=True)
    return activities[:limit]
