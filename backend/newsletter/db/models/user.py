"""Admin user ORM model."""

from uuid import UUID, uuid4

from sqlalchemy import Text
from sqlalchemy.orm import Mapped, mapped_column

from backend.newsletter.db.base import Base
from backend.newsletter.db.types import UniversalUUID


class User(Base):
    """Admin accounts allowed to publish newsletter issues."""

    __tablename__ = "users"

    user_id: Mapped[UUID] = mapped_column(
        UniversalUUID(), primary_key=True, default=uuid4
    )
    username: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)  # Argon2id

    def __repr__(self) -> str:
        return f"<User(user_id={self.user_id}, username={self.username!r})>"
