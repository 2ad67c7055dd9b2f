"""Security utilities for admin authentication."""

from .credentials import validate_credentials
from .passwords import hash_password, verify_password
from .sessions import SESSION_COOKIE, create_session_token, read_session_token

__all__ = [
    "SESSION_COOKIE",
    "create_session_token",
    "hash_password",
    "read_session_token",
    "validate_credentials",
    "verify_password",
]
