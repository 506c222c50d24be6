"""Project operations on top of the record store."""

import logging
from typing import Any

from api.errors import RecordNotFoundError
from api.models.project import Project, ProjectStats
from api.services.record_store import ContainerNotFoundError, get_project_store
from api.services.validation import parse_year, validate_project

logger = logging.getLogger(__name__)

KIND = "project"


def _normalize(data: dict[str, Any]) -> dict[str, Any]:
    """Store years as strings; only completed projects keep an end year."""
    normalized = dict(data)
    normalized["startYear"] = str(parse_year(data["startYear"]))
    if data.get("status") == "completed":
        normalized["endYear"] = str(parse_year(data["endYear"]))
    else:
        normalized["endYear"] = None
    return normalized


def _sort_key(project: Project) -> tuple[int, int]:
    # Completed first (newest end year first), then ongoing by start year
    if project.status == "completed":
        return (0, -(parse_year(project.end_year) or 0))
    return (1, -(parse_year(project.start_year) or 0))


async def create_project(data: dict[str, Any]) -> Project:
    """Validate and store a new project."""
    validate_project(data).raise_for_errors()
    record = _normalize(data)
    record.pop("id", None)
    record["description"] = record.get("description") or ""
    stored = await get_project_store().create(record)
    return Project.model_validate(stored)


async def get_project(project_id: str) -> Project | None:
    record = await get_project_store().get_by_id(project_id)
    return Project.model_validate(record) if record else None


async def list_projects(
    status: str | None = None, sector: str | None = None
) -> list[Project]:
    """Return every project matching the filters, completed ones first."""
    try:
        records = await get_project_store().scan()
    except ContainerNotFoundError:
        logger.info("Project container not found, returning no projects")
        return []
    projects = [
        Project.model_validate(r)
        for r in records
        if (not status or r.get("status") == status)
        and (not sector or r.get("sector") == sector)
    ]
    projects.sort(key=_sort_key)
    return projects


async def update_project(project_id: str, fields: dict[str, Any]) -> Project:
    """Merge *fields* into a project and re-validate the result.

    Raises:
        RecordNotFoundError: if the project does not exist.
        RecordValidationError: if the merged project violates a constraint.
    """
    store = get_project_store()
    existing = await store.get_by_id(project_id)
    if existing is None:
        raise RecordNotFoundError(KIND, project_id)
    merged = {**existing, **fields}
    validate_project(merged).raise_for_errors()
    normalized = _normalize(merged)
    changes = {**fields}
    changes["startYear"] = normalized["startYear"]
    changes["endYear"] = normalized["endYear"]
    stored = await store.update(project_id, changes)
    return Project.model_validate(stored)


async def delete_project(project_id: str) -> None:
    await get_project_store().delete(project_id)


async def get_project_stats() -> ProjectStats:
    """Count all projects and ongoing projects with a full scan."""
    try:
        records = await get_project_store().scan()
    except ContainerNotFoundError:
        logger.info("Project container not found, returning zero counts")
        return ProjectStats()
    return ProjectStats(
        total=len(records),
        ongoing=sum(1 for r in records if r.get("status") == "ongoing"),
    )
