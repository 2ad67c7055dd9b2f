"""Pytest configuration and fixtures for testing."""

import json

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from backend.newsletter.config import Settings
from backend.newsletter.context import ApplicationContext
from backend.newsletter.db import models  # noqa: F401  registers all tables
from backend.newsletter.db.base import Base, get_engine, get_session_factory
from backend.newsletter.db.models.subscription import STATUS_CONFIRMED, Subscription
from backend.newsletter.db.models.user import User
from backend.newsletter.domain import SubscriberEmail
from backend.newsletter.email_client import EmailClient
from backend.newsletter.main import create_app
from backend.newsletter.security.passwords import hash_password

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "correct-horse-battery-staple"


class RecordingEmailServer:
    """In-process stand-in for the email API.

    Every request is recorded; ``status_code`` decides the answer.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = 200

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json={})

    @property
    def payloads(self) -> list[dict]:
        return [json.loads(request.content) for request in self.requests]

    @property
    def recipients(self) -> list[str]:
        return [payload["To"] for payload in self.payloads]


@pytest.fixture(scope="function")
def test_settings(tmp_path) -> Settings:
    """Settings pointing at a throwaway SQLite file."""
    return Settings(
        postgres_url=f"sqlite:///{(tmp_path / 'newsletter.db').as_posix()}",
        email_base_url="http://email-api.local",
        email_authorization_token="test-server-token",
        app_base_url="http://127.0.0.1:8000",
    )


@pytest.fixture(scope="function")
def test_db_engine(test_settings):
    """Create a test database engine backed by a SQLite file.

    A file (not ``:memory:``) keeps every pooled connection on the same
    database, which the request threads and worker threads need.
    """
    engine = get_engine(test_settings)

    # Create all tables
    Base.metadata.create_all(engine)

    yield engine

    # Cleanup
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(test_db_engine) -> sessionmaker[Session]:
    return get_session_factory(test_db_engine)


@pytest.fixture(scope="function")
def test_session(session_factory):
    """Create a test database session."""
    session = session_factory()

    yield session

    session.close()


@pytest.fixture(scope="function")
def email_server() -> RecordingEmailServer:
    return RecordingEmailServer()


@pytest.fixture(scope="function")
def email_client(test_settings, email_server):
    client = EmailClient(
        base_url=test_settings.email_base_url,
        sender=SubscriberEmail.parse(test_settings.email_sender),
        authorization_token=test_settings.email_authorization_token,
        timeout=1.0,
        transport=httpx.MockTransport(email_server.handle),
    )
    yield client
    client.close()


@pytest.fixture(scope="function")
def app_context(test_settings, session_factory, email_client) -> ApplicationContext:
    return ApplicationContext(
        settings=test_settings,
        session_factory=session_factory,
        email_client=email_client,
    )


@pytest.fixture(scope="function")
def test_client(app_context):
    """Client that does not follow redirects, so 303s can be asserted."""
    with TestClient(create_app(app_context), follow_redirects=False) as client:
        yield client


@pytest.fixture(scope="function")
def admin_credentials() -> tuple[str, str]:
    return ADMIN_USERNAME, ADMIN_PASSWORD


@pytest.fixture(scope="function")
def test_admin(test_session: Session) -> User:
    """Create an admin user with a known password."""
    user = User(username=ADMIN_USERNAME, password_hash=hash_password(ADMIN_PASSWORD))
    test_session.add(user)
    test_session.commit()
    return user


@pytest.fixture(scope="function")
def admin_client(test_client, test_admin):
    """Client holding a valid admin session cookie."""
    response = test_client.post(
        "/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD}
    )
    assert response.status_code == 303
    assert response.headers["location"] == "/admin/newsletters"
    return test_client


@pytest.fixture(scope="function")
def add_confirmed_subscribers(test_session: Session):
    """Insert confirmed subscribers directly, bypassing sign-up."""

    def _add(*emails: str) -> list[Subscription]:
        subscriptions = [
            Subscription(email=email, name=email.split("@")[0], status=STATUS_CONFIRMED)
            for email in emails
        ]
        test_session.add_all(subscriptions)
        test_session.commit()
        return subscriptions

    return _add
