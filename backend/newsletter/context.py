"""Application context shared by request handlers and the delivery worker."""

from collections.abc import Generator
from dataclasses import dataclass

from fastapi import Depends, Request
from sqlalchemy.orm import Session, sessionmaker

from backend.newsletter.config import Settings, get_settings
from backend.newsletter.db.base import get_engine, get_session_factory
from backend.newsletter.email_client import EmailClient


@dataclass
class ApplicationContext:
    """Owned collaborators, built once per process and passed explicitly."""

    settings: Settings
    session_factory: sessionmaker[Session]
    email_client: EmailClient

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "ApplicationContext":
        settings = settings or get_settings()
        return cls(
            settings=settings,
            session_factory=get_session_factory(get_engine(settings)),
            email_client=EmailClient.from_settings(settings),
        )

    def close(self) -> None:
        self.email_client.close()
        bind = self.session_factory.kw.get("bind")
        if bind is not None:
            bind.dispose()


def get_context(request: Request) -> ApplicationContext:
    """Dependency returning the context attached by ``create_app``."""
    return request.app.state.context


def get_db_session(
    context: ApplicationContext = Depends(get_context),
) -> Generator[Session, None, None]:
    """Dependency to get a database session."""
    session = context.session_factory()
    try:
        yield session
    finally:
        session.close()
