"""Signed admin session tokens carried in a cookie."""

from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt

from backend.newsletter.config import Settings

SESSION_COOKIE = "session"
_ALGORITHM = "HS256"


def create_session_token(user_id: UUID, settings: Settings) -> str:
    """Create a session token for ``user_id`` valid for the configured TTL."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + timedelta(minutes=settings.session_ttl_minutes),
    }
    return jwt.encode(payload, settings.session_secret, algorithm=_ALGORITHM)


def read_session_token(token: str, settings: Settings) -> UUID | None:
    """Return the user id in a valid token, or None if it is invalid or expired."""
    try:
        payload = jwt.decode(token, settings.session_secret, algorithms=[_ALGORITHM])
        return UUID(payload["sub"])
    except (jwt.InvalidTokenError, KeyError, ValueError):
        return None
