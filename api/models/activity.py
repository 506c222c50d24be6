"""Admin dashboard activity feed models."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel


class ActivityItem(BaseModel):
    """One recent change to a project or blog post."""

    id: str
    type: Literal["project", "blog"]
    action: str
    title: str
    timestamp: datetime
