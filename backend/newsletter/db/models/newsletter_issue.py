"""Newsletter issue and delivery queue ORM models."""

from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column

from backend.newsletter.db.base import Base
from backend.newsletter.db.types import UniversalUUID


class NewsletterIssue(Base):
    """Published issues. Written once, never updated."""

    __tablename__ = "newsletter_issues"

    newsletter_issue_id: Mapped[UUID] = mapped_column(UniversalUUID(), primary_key=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    text_content: Mapped[str] = mapped_column(Text, nullable=False)
    html_content: Mapped[str] = mapped_column(Text, nullable=False)
    published_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<NewsletterIssue(id={self.newsletter_issue_id}, title={self.title!r})>"


class IssueDeliveryTask(Base):
    """One pending delivery of an issue to one subscriber."""

    __tablename__ = "issue_delivery_queue"

    newsletter_issue_id: Mapped[UUID] = mapped_column(
        UniversalUUID(),
        ForeignKey("newsletter_issues.newsletter_issue_id"),
        primary_key=True,
    )
    subscriber_email: Mapped[str] = mapped_column(Text, primary_key=True)

    def __repr__(self) -> str:
        return (
            f"<IssueDeliveryTask(issue={self.newsletter_issue_id}, "
            f"email={self.subscriber_email!r})>"
        )
