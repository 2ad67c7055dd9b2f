"""Issue delivery queue backed by the ``issue_delivery_queue`` table.

A claim is an open transaction holding a row lock taken with
``FOR UPDATE SKIP LOCKED``: concurrent claimants skip rows that are already
claimed instead of waiting for them. The row disappears when the claim is
released (DELETE + COMMIT). If the claimant dies or abandons the claim, its
transaction rolls back and the row becomes claimable again.
"""

from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session, sessionmaker

from backend.newsletter.db.models.newsletter_issue import IssueDeliveryTask


@dataclass
class ClaimedTask:
    """A locked queue row plus the transaction holding the lock."""

    session: Session
    newsletter_issue_id: UUID
    subscriber_email: str


def claim_one(session_factory: sessionmaker[Session]) -> ClaimedTask | None:
    """
    Lock one unclaimed delivery task.

    Args:
        session_factory: Factory used to open the claim transaction

    Returns:
        ClaimedTask whose session must be passed to ``release`` or
        ``abandon``, or None if no unclaimed task exists
    """
    session = session_factory()
    try:
        row = session.execute(
            select(
                IssueDeliveryTask.newsletter_issue_id,
                IssueDeliveryTask.subscriber_email,
            )
            .limit(1)
            .with_for_update(skip_locked=True)
        ).first()
    except Exception:
        session.rollback()
        session.close()
        raise

    if row is None:
        session.rollback()
        session.close()
        return None

    return ClaimedTask(
        session=session,
        newsletter_issue_id=row.newsletter_issue_id,
        subscriber_email=row.subscriber_email,
    )


def release(task: ClaimedTask) -> None:
    """Delete the claimed row and commit, ending the claim."""
    session = task.session
    try:
        session.execute(
            delete(IssueDeliveryTask).where(
                IssueDeliveryTask.newsletter_issue_id == task.newsletter_issue_id,
                IssueDeliveryTask.subscriber_email == task.subscriber_email,
            )
        )
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def abandon(task: ClaimedTask) -> None:
    """Roll the claim back, leaving the row in the queue for another attempt."""
    try:
        task.session.rollback()
    finally:
        task.session.close()


def count_pending(session: Session) -> int:
    """Count queued deliveries, claimed or not."""
    return session.execute(
        select(func.count()).select_from(IssueDeliveryTask)
    ).scalar_one()
