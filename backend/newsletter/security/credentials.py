"""Admin credential verification."""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.newsletter.db.models.user import User
from backend.newsletter.errors import InvalidPasswordError, InvalidUsernameError

from .passwords import verify_password

logger = logging.getLogger(__name__)


def validate_credentials(session: Session, username: str, password: str) -> UUID:
    """Check a username/password pair.

    Args:
        session: Database session
        username: Submitted username
        password: Submitted plain text password

    Returns:
        The user's id

    Raises:
        InvalidUsernameError: No user has that username
        InvalidPasswordError: The password does not match
    """
    user = session.execute(
        select(User).where(User.username == username)
    ).scalar_one_or_none()

    if user is None:
        raise InvalidUsernameError("Invalid username.")

    if not verify_password(password, user.password_hash):
        logger.info("login_rejected", extra={"user_id": str(user.user_id)})
        raise InvalidPasswordError("Invalid password.")

    return user.user_id
