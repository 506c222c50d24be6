"""Project data models."""

from datetime import datetime
from typing import Any, Literal

from api.models.common import CamelModel, CountStats

ProjectStatus = Literal["ongoing", "completed"]


class Project(CamelModel):
    """A stored project record."""

    id: str
    title: str
    client: str
    sector: str = ""
    description: str = ""
    status: ProjectStatus
    coordinates: tuple[float, float]  # (latitude, longitude)
    start_year: str
    end_year: str | None = None
    duration: str | None = None
    images: list[str] | None = None
    impact: list[str] | None = None
    created_at: datetime
    updated_at: datetime


class ProjectCreate(CamelModel):
    """Admin create payload; checked by ``validate_project`` before writing."""

    title: str = ""
    client: str = ""
    sector: str = ""
    description: str = ""
    status: str | None = None
    coordinates: list[Any] | None = None
    start_year: str | int | None = None
    end_year: str | int | None = None
    duration: str | None = None
    images: list[str] | None = None
    impact: list[str] | None = None


class ProjectUpdate(CamelModel):
    """Update payload; the record id travels in the body."""

    id: str
    title: str | None = None
    client: str | None = None
    sector: str | None = None
    description: str | None = None
    status: str | None = None
    coordinates: list[Any] | None = None
    start_year: str | int | None = None
    end_year: str | int | None = None
    duration: str | None = None
    images: list[str] | None = None
    impact: list[str] | None = None


class ProjectDelete(CamelModel):
    """Delete payload; the record id travels in the body."""

    id: str


class ProjectStats(CountStats):
    """Project counts for the admin dashboard."""

    ongoing: int = 0
