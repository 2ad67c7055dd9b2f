"""Declarative base, engine construction and transactional sessions.

Every unit of work in the newsletter service (a publish, a queue claim, a
sign-up) runs in a session from ``get_session_factory``. ``get_session`` is
the short form for work that should commit on success and roll back on any
error.
"""

from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from backend.newsletter.config import Settings


class Base(DeclarativeBase):
    """Base class for newsletter ORM models."""


def get_engine(settings: Settings) -> Engine:
    """Build the engine for ``settings.postgres_url``.

    SQLite is only used by tests and local runs; its connections are shared
    between request threads and the delivery worker thread.
    """
    url = settings.postgres_url
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    # Queue claims hold a connection for the length of one delivery
    return create_engine(url, pool_pre_ping=True, pool_size=5, max_overflow=10)


def get_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Session factory with autoflush off and attributes kept after commit."""
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@contextmanager
def get_session(session_factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    """Open a session that commits on exit and rolls back on any exception.

    Args:
        session_factory: Factory returned by ``get_session_factory``.

    Yields:
        Database session.

    Example:
        >>> factory = get_session_factory(get_engine(get_settings()))
        >>> with get_session(factory) as session:
        ...     session.add(Subscription(email="a@x.com", name="A", status=STATUS_PENDING))
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
