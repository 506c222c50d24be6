"""Project endpoints."""

import logging
from typing import Any, Literal

from fastapi import APIRouter, Body, Depends, Query, Response

from api.dependencies import require_admin
from api.models.auth import AdminUser
from api.models.project import (
    Project,
    ProjectCreate,
    ProjectDelete,
    ProjectStats,
    ProjectUpdate,
)
from api.services.projects import (
    create_project,
    delete_project,
    get_project_stats,
    list_projects,
    update_project,
)
from api.services.validation import validate_project

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("", response_model=list[Project])
async def list_all_projects(
    status: Literal["ongoing", "completed"] | None = Query(default=None),
    sector: str | None = Query(default=None, max_length=200),
):
    """List projects, completed ones first (newest end year first)."""
    return await list_projects(status=status, sector=sector)


@router.post("", response_model=Project)
async def add_project(
    project: ProjectCreate, admin: AdminUser = Depends(require_admin)
):
    """Create a project after validating coordinates and years."""
    created = await create_project(project.model_dump(by_alias=True, mode="json"))
    logger.info("%s created project %s", admin.username, created.id)
    return created


@router.put("", response_model=Project)
async def edit_project(
    changes: ProjectUpdate, admin: AdminUser = Depends(require_admin)
):
    """Update the project named by ``id`` in the body."""
    fields = changes.model_dump(by_alias=True, mode="json", exclude_unset=True)
    project_id = fields.pop("id")
    updated = await update_project(project_id, fields)
    logger.info("%s updated project %s", admin.username, project_id)
    return updated


@router.delete("", status_code=204)
async def remove_project(
    target: ProjectDelete, admin: AdminUser = Depends(require_admin)
):
    """Delete the project named by ``id`` in the body. Idempotent."""
    await delete_project(target.id)
    logger.info("%s deleted project %s", admin.username, target.id)
    return Response(status_code=204)


@router.post("/validate")
async def validate_project_fields(data: dict[str, Any] = Body(...)):
    """Check project fields without saving, for early form feedback."""
    return validate_project(data).to_dict()


@router.get("/stats", response_model=ProjectStats)
async def project_stats(admin: AdminUser = Depends(require_admin)):
    """Total and ongoing project counts."""
    return await get_project_stats()
