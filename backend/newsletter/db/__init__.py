"""Database package for ORM models and session management."""

from .base import Base, get_engine, get_session, get_session_factory

__all__ = [
    "Base",
    "get_engine",
    "get_session",
    "get_session_factory",
]
