#!/usr/bin/env python3
"""Create an admin user with proper password hashing."""

import argparse
import getpass
import sys

from sqlalchemy import select

from backend.newsletter.db.base import get_session
from backend.newsletter.db.models.user import User
from backend.newsletter.db.session import get_session_factory
from backend.newsletter.security.passwords import hash_password


def create_admin(username: str, password: str) -> User | None:
    """Create an admin user, or return None if the username is taken."""
    with get_session(get_session_factory()) as session:
        existing = session.execute(
            select(User).where(User.username == username)
        ).scalar_one_or_none()
        if existing is not None:
            return None

        user = User(username=username, password_hash=hash_password(password))
        session.add(user)
        session.flush()
        return user


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("username")
    args = parser.parse_args()

    password = getpass.getpass("Password: ")
    try:
        user = create_admin(args.username, password)
    except ValueError as e:
        print(f"Invalid password: {e}", file=sys.stderr)
        return 1

    if user is None:
        print(f"User {args.username} already exists", file=sys.stderr)
        return 1

    print(f"Created admin {user.username} ({user.user_id})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
