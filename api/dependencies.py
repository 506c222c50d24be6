"""Shared FastAPI dependencies."""

from fastapi import Header

from api.errors import AuthenticationError
from api.models.auth import AdminUser
from api.services.auth import decode_token


async def require_admin(authorization: str | None = Header(default=None)) -> AdminUser:
    """Gate a route behind a valid ``Authorization: Bearer <token>`` header."""
    if not authorization:
        raise AuthenticationError("Missing bearer token")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Missing bearer token")
    return decode_token(token.strip())
