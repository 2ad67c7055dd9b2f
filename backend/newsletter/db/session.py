"""Process-wide engine and session factory built from settings."""

from sqlalchemy import Engine
from sqlalchemy.orm import Session, sessionmaker

from backend.newsletter.config import get_settings
from backend.newsletter.db.base import get_engine as build_engine
from backend.newsletter.db.base import get_session_factory as build_session_factory

# Create engine - singleton pattern
_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def get_engine() -> Engine:
    """Get SQLAlchemy engine singleton."""
    global _engine
    if _engine is None:
        _engine = build_engine(get_settings())
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    """Get session factory singleton."""
    global _session_factory
    if _session_factory is None:
        _session_factory = build_session_factory(get_engine())
    return _session_factory
