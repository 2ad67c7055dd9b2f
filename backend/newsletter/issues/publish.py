"""Publish a newsletter issue exactly once per idempotency key.

The issue row, its delivery tasks and the saved idempotent response are
written in the transaction opened by ``try_processing``. Either all three
are committed together or none of them is.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import UUID, uuid4

from sqlalchemy import cast, insert, literal, select
from sqlalchemy.orm import Session, sessionmaker
from starlette.responses import Response

from backend.newsletter.db.models.newsletter_issue import (
    IssueDeliveryTask,
    NewsletterIssue,
)
from backend.newsletter.db.models.subscription import STATUS_CONFIRMED, Subscription
from backend.newsletter.db.types import UniversalUUID
from backend.newsletter.idempotency import (
    IdempotencyKey,
    ReturnSavedResponse,
    save_response,
    try_processing,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NewsletterContent:
    """Validated body of a publish request."""

    title: str
    text_content: str
    html_content: str


def publish_issue(
    session_factory: sessionmaker[Session],
    user_id: UUID,
    idempotency_key: IdempotencyKey,
    content: NewsletterContent,
    build_response: Callable[[], Response],
) -> Response:
    """
    Create an issue and enqueue its deliveries, or replay a previous result.

    Args:
        session_factory: Factory for the publishing transaction
        user_id: Admin publishing the issue
        idempotency_key: Validated key scoping retries of this request
        content: Issue title and bodies
        build_response: Builds the acknowledgment returned to the client

    Returns:
        The freshly built acknowledgment, or the saved one if the key was
        already processed

    Raises:
        IdempotencyRecordNotFoundError: If the key was started but never
            completed
        SQLAlchemyError: If any statement or the commit fails; nothing is
            persisted in that case
    """
    next_action = try_processing(session_factory, idempotency_key, user_id)
    if isinstance(next_action, ReturnSavedResponse):
        return next_action.response

    session = next_action.session
    try:
        issue_id = insert_newsletter_issue(session, content)
        task_count = enqueue_delivery_tasks(session, issue_id)
        response = save_response(session, idempotency_key, user_id, build_response())
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

    logger.info(
        "newsletter_issue_published",
        extra={
            "user_id": str(user_id),
            "newsletter_issue_id": str(issue_id),
            "delivery_tasks": task_count,
        },
    )
    return response


def insert_newsletter_issue(session: Session, content: NewsletterContent) -> UUID:
    """
    Insert a new issue row.

    Args:
        session: Session inside the publishing transaction
        content: Issue title and bodies

    Returns:
        Generated issue id
    """
    issue_id = uuid4()
    session.add(
        NewsletterIssue(
            newsletter_issue_id=issue_id,
            title=content.title,
            text_content=content.text_content,
            html_content=content.html_content,
            published_at=datetime.now(timezone.utc),
        )
    )
    session.flush()
    return issue_id


def enqueue_delivery_tasks(session: Session, issue_id: UUID) -> int:
    """
    Queue one delivery per currently confirmed subscriber.

    Runs as a single INSERT ... SELECT so the subscriber snapshot and the
    queue rows come from the same statement.

    Args:
        session: Session inside the publishing transaction
        issue_id: Issue to deliver

    Returns:
        Number of tasks queued
    """
    confirmed = select(
        cast(literal(issue_id, UniversalUUID()), UniversalUUID()),
        Subscription.email,
    ).where(Subscription.status == STATUS_CONFIRMED)

    result = session.execute(
        insert(IssueDeliveryTask.__table__).from_select(
            ["newsletter_issue_id", "subscriber_email"], confirmed
        )
    )
    return result.rowcount
