"""Subscription ORM models."""

from datetime import datetime, timezone
from uuid import UUID, uuid4

from sqlalchemy import DateTime, ForeignKey, Index, Text
from sqlalchemy.orm import Mapped, mapped_column

from backend.newsletter.db.base import Base
from backend.newsletter.db.types import UniversalUUID

STATUS_PENDING = "pending_confirmation"
STATUS_CONFIRMED = "confirmed"


class Subscription(Base):
    """Newsletter subscribers."""

    __tablename__ = "subscriptions"

    id: Mapped[UUID] = mapped_column(UniversalUUID(), primary_key=True, default=uuid4)
    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    subscribed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    status: Mapped[str] = mapped_column(
        Text, nullable=False, default=STATUS_PENDING
    )  # pending_confirmation | confirmed

    __table_args__ = (Index("idx_subscriptions_status", "status"),)

    def __repr__(self) -> str:
        return f"<Subscription(id={self.id}, email={self.email!r}, status={self.status!r})>"


class SubscriptionToken(Base):
    """Confirmation tokens mailed to pending subscribers."""

    __tablename__ = "subscription_tokens"

    subscription_token: Mapped[str] = mapped_column(Text, primary_key=True)
    subscriber_id: Mapped[UUID] = mapped_column(
        UniversalUUID(),
        ForeignKey("subscriptions.id", ondelete="CASCADE"),
        nullable=False,
    )
