"""Admin authentication models."""

from datetime import datetime

from pydantic import BaseModel, Field

from api.models.common import CamelModel


class LoginRequest(BaseModel):
    """Admin sign-in form."""

    username: str = Field(..., min_length=1, max_length=200)
    password: str = Field(..., min_length=1, max_length=1024)


class AdminUser(BaseModel):
    """Authenticated admin identity carried by a session token."""

    username: str
    role: str = "admin"


class SessionToken(CamelModel):
    """Bearer token issued on successful sign-in."""

    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: AdminUser
