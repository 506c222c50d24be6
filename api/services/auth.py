"""Admin credential verification and session token issuance.

Admin accounts live in settings as PBKDF2-SHA256 hashes
(``pbkdf2_sha256$<iterations>$<salt>$<hex digest>``). A successful sign-in
yields a short-lived HS256 JWT that admin routes verify on every request.
"""

import hashlib
import hmac
import logging
import secrets
from datetime import datetime, timedelta, timezone
from functools import lru_cache

import jwt

from api.config import get_settings
from api.errors import AuthenticationError
from api.models.auth import AdminUser, SessionToken

logger = logging.getLogger(__name__)

HASH_ALGORITHM = "pbkdf2_sha256"
DEFAULT_ITERATIONS = 600_000
TOKEN_ALGORITHM = "HS256"
TOKEN_AUDIENCE = "oikos-admin"


def hash_password(
    password: str, *, salt: str | None = None, iterations: int = DEFAULT_ITERATIONS
) -> str:
    """Hash a password for storage in ``ADMIN_USERS``."""
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), iterations
    )
    return f"{HASH_ALGORITHM}${iterations}${salt}${digest.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    """Check *password* against a stored hash string."""
    try:
        algorithm, iterations, salt, expected = encoded.split("$")
        rounds = int(iterations)
    except ValueError:
        return False
    if algorithm != HASH_ALGORITHM:
        return False
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), rounds
    )
    return hmac.compare_digest(digest.hex(), expected)


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password("", salt="0" * 32)


def authenticate(username: str, password: str) -> AdminUser | None:
    """Return the admin identity if the credentials match, else None."""
    stored = get_settings().admin_users.get(username)
    if stored is None:
        # Same work for unknown users so timing does not reveal usernames
        verify_password(password, _dummy_hash())
        return None
    if not verify_password(password, stored):
        return None
    return AdminUser(username=username)


def issue_token(user: AdminUser) -> SessionToken:
    """Sign a session token for an authenticated admin."""
    settings = get_settings()
    if not settings.session_secret:
        raise AuthenticationError("Sign-in is not configured")
    now = datetime.now(timezone.utc)
    expires_at = now + timedelta(minutes=settings.session_ttl_minutes)
    token = jwt.encode(
        {
            "sub": user.username,
            "role": user.role,
            "aud": TOKEN_AUDIENCE,
            "iat": now,
            "exp": expires_at,
        },
        settings.session_secret,
        algorithm=TOKEN_ALGORITHM,
    )
    return SessionToken(access_token=token, expires_at=expires_at, user=user)


def decode_token(token: str) -> AdminUser:
    """Verify a session token and return the admin it was issued to.

    Raises:
        AuthenticationError: if the token is invalid, expired or was signed
            for someone other than a configured admin.
    """
    settings = get_settings()
    if not settings.session_secret:
        raise AuthenticationError("Sign-in is not configured")
    try:
        claims = jwt.decode(
            token,
            settings.session_secret,
            algorithms=[TOKEN_ALGORITHM],
            audience=TOKEN_AUDIENCE,
        )
    except jwt.ExpiredSignatureError as e:
        raise AuthenticationError("Session expired") from e
    except jwt.InvalidTokenError as e:
        raise AuthenticationError("Invalid session token") from e

    username = claims.get("sub")
    if username not in settings.admin_users:
        logger.warning("Token presented for unknown admin %r", username)
        raise AuthenticationError("Invalid session token")
    return AdminUser(username=username, role=claims.get("role", "admin"))
