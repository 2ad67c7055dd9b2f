"""Idempotency ORM model."""

from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import DateTime, Index, LargeBinary, SmallInteger, Text
from sqlalchemy.orm import Mapped, mapped_column

from backend.newsletter.db.base import Base
from backend.newsletter.db.types import HeaderPair, HeaderPairs, UniversalUUID


class IdempotencyRecord(Base):
    """Saved responses keyed by (user, idempotency key).

    A row with NULL response columns is a placeholder: some request holding
    the row's transaction is still computing the response.
    """

    __tablename__ = "idempotency"

    user_id: Mapped[UUID] = mapped_column(UniversalUUID(), primary_key=True)
    idempotency_key: Mapped[str] = mapped_column(Text, primary_key=True)
    response_status_code: Mapped[int | None] = mapped_column(
        SmallInteger, nullable=True
    )
    response_headers: Mapped[list[HeaderPair] | None] = mapped_column(
        HeaderPairs(), nullable=True
    )
    response_body: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (Index("idx_idempotency_created_at", "created_at"),)

    @property
    def is_completed(self) -> bool:
        return self.response_status_code is not None

    def __repr__(self) -> str:
        return (
            f"<IdempotencyRecord(user_id={self.user_id}, "
            f"key={self.idempotency_key!r}, completed={self.is_completed})>"
        )
