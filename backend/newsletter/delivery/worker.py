"""Background worker draining the issue delivery queue.

Each iteration claims one task, attempts one delivery and releases the task.
Delivery policy:

- A stored address that fails validation is skipped permanently.
- A failed send is logged and the task is still released. A task is only
  attempted again if the worker dies (or the iteration errors) before the
  release commits, which rolls the claim back.
- An empty queue puts the loop to sleep for ``idle_interval`` seconds; any
  unexpected error for ``error_backoff`` seconds. Neither ends the loop.
"""

import asyncio
import logging
from enum import Enum
from uuid import UUID

from sqlalchemy.orm import Session, sessionmaker

from backend.newsletter.context import ApplicationContext
from backend.newsletter.db.models.newsletter_issue import NewsletterIssue
from backend.newsletter.domain import SubscriberEmail
from backend.newsletter.email_client import EmailClient
from backend.newsletter.errors import (
    EmailDeliveryError,
    IssueNotFoundError,
    SubscriberValidationError,
)

from .queue import ClaimedTask, abandon, claim_one, release

logger = logging.getLogger(__name__)


class ExecutionOutcome(Enum):
    TASK_COMPLETED = "task_completed"
    EMPTY_QUEUE = "empty_queue"


def try_execute_task(
    session_factory: sessionmaker[Session],
    email_client: EmailClient,
) -> ExecutionOutcome:
    """
    Claim, deliver and release a single task.

    Args:
        session_factory: Factory for the claim transaction
        email_client: Transport used for delivery

    Returns:
        EMPTY_QUEUE if nothing was claimable, TASK_COMPLETED otherwise

    Raises:
        Exception: Any database failure. The claim is rolled back first, so
            the task stays queued.
    """
    task = claim_one(session_factory)
    if task is None:
        return ExecutionOutcome.EMPTY_QUEUE

    try:
        _deliver(task, email_client)
    except Exception:
        abandon(task)
        raise

    release(task)
    return ExecutionOutcome.TASK_COMPLETED


def _deliver(task: ClaimedTask, email_client: EmailClient) -> None:
    log_context = {
        "newsletter_issue_id": str(task.newsletter_issue_id),
        "subscriber_email": task.subscriber_email,
    }

    try:
        recipient = SubscriberEmail.parse(task.subscriber_email)
    except SubscriberValidationError as e:
        logger.error(
            "Skipping a confirmed subscriber. Their stored contact details are invalid.",
            extra={**log_context, "error": e.message},
        )
        return

    issue = get_issue(task.session, task.newsletter_issue_id)
    try:
        email_client.send_email(
            recipient,
            issue.title,
            issue.html_content,
            issue.text_content,
        )
    except EmailDeliveryError as e:
        logger.error(
            "Failed to deliver issue to a confirmed subscriber. Skipping.",
            extra={**log_context, "error": e.message},
        )
        return

    logger.info("issue_delivered", extra=log_context)


def get_issue(session: Session, issue_id: UUID) -> NewsletterIssue:
    """
    Load the issue a task points at.

    Raises:
        IssueNotFoundError: If the issue row does not exist
    """
    issue = session.get(NewsletterIssue, issue_id)
    if issue is None:
        raise IssueNotFoundError(f"Newsletter issue {issue_id} does not exist.")
    return issue


async def worker_loop(
    session_factory: sessionmaker[Session],
    email_client: EmailClient,
    *,
    idle_interval: float = 10.0,
    error_backoff: float = 1.0,
) -> None:
    """Run delivery iterations until cancelled.

    Blocking database and HTTP work runs in a worker thread; the sleeps are
    the loop's cancellation points.
    """
    while True:
        try:
            outcome = await asyncio.to_thread(
                try_execute_task, session_factory, email_client
            )
        except Exception:
            logger.exception("Delivery iteration failed")
            await asyncio.sleep(error_backoff)
            continue

        if outcome is ExecutionOutcome.EMPTY_QUEUE:
            await asyncio.sleep(idle_interval)


async def run_worker_until_stopped(context: ApplicationContext) -> None:
    """Start the delivery loop with the application's pool and email client."""
    settings = context.settings
    logger.info(
        "Delivery worker started",
        extra={
            "idle_interval": settings.worker_idle_interval_s,
            "error_backoff": settings.worker_error_backoff_s,
        },
    )
    await worker_loop(
        context.session_factory,
        context.email_client,
        idle_interval=settings.worker_idle_interval_s,
        error_backoff=settings.worker_error_backoff_s,
    )
