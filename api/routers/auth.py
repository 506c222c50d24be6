"""Admin sign-in endpoints."""

import logging

from fastapi import APIRouter, Depends, Request

from api.dependencies import require_admin
from api.errors import AuthenticationError
from api.models.auth import AdminUser, LoginRequest, SessionToken
from api.services.auth import authenticate, issue_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=SessionToken)
async def login(credentials: LoginRequest, request: Request):
    """Exchange admin credentials for a bearer token."""
    client_ip = request.client.host if request.client else "unknown"
    user = authenticate(credentials.username, credentials.password)
    if user is None:
        logger.warning(
            "Failed sign-in for %r from %s", credentials.username[:50], client_ip
        )
        raise AuthenticationError("Invalid credentials")
    token = issue_token(user)
    logger.info("Admin %s signed in from %s", user.username, client_ip)
    return token


@router.get("/me", response_model=AdminUser)
async def current_admin(admin: AdminUser = Depends(require_admin)):
    """Return the admin the bearer token belongs to."""
    return admin
