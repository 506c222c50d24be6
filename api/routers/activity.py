"""Admin dashboard activity feed."""

from fastapi import APIRouter, Depends, Query

from api.dependencies import require_admin
from api.models.activity import ActivityItem
from api.models.auth import AdminUser
from api.services.activity import MAX_ACTIVITY_ITEMS, get_recent_activity

router = APIRouter(prefix="/activity", tags=["activity"])


@router.get("", response_model=list[ActivityItem])
async def list_activity(
    limit: int = Query(MAX_ACTIVITY_ITEMS, ge=1, le=100),
    admin: AdminUser = Depends(require_admin),
):
    """Most recently changed projects and blog posts, newest first."""
    return await get_recent_activity(limit=limit)
