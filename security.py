"""Admin session tokens (JWT)."""

from datetime import datetime, timedelta, timezone

import jwt
from fastapi import Header

from config import settings
from errors import AuthError


def check_password(password: str | None) -> bool:
    # Plain equality; no hashing or lockout.
    return password is not None and password == settings.ADMIN_PASSWORD


def create_session_token(now: datetime | None = None) -> tuple[str, datetime]:
    issued = now or datetime.now(timezone.utc)
    expires = issued + timedelta(hours=settings.ADMIN_SESSION_HOURS)
    payload = {"sub": "admin", "iat": issued, "exp": expires}
    return jwt.encode(payload, settings.SESSION_SECRET, algorithm="HS256"), expires


def decode_session_token(token: str) -> dict:
    """Raises ``jwt.InvalidTokenError`` (incl. expiry) on a bad token."""
    return jwt.decode(token, settings.SESSION_SECRET, algorithms=["HS256"])


def require_admin(authorization: str | None = Header(default=None)) -> dict:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise AuthError("unauthorized", "Admin login required")

    try:
        claims = decode_session_token(authorization[7:].strip())
    except jwt.InvalidTokenError:
        raise AuthError("unauthorized", "Session expired or invalid")

    if claims.get("sub") != "admin":
        raise AuthError("unauthorized", "Admin login required")
    return claims
