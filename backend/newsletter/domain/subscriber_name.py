"""Validated subscriber display name."""

from dataclasses import dataclass

from backend.newsletter.errors import SubscriberValidationError

MAX_NAME_LENGTH = 256
FORBIDDEN_CHARACTERS = frozenset('/()"<>\\{}')


@dataclass(frozen=True)
class SubscriberName:
    value: str

    @classmethod
    def parse(cls, value: str) -> "SubscriberName":
        """Reject blank names, overlong names and names with markup characters."""
        if not value or not value.strip():
            raise SubscriberValidationError("Subscriber's name is empty.")
        if len(value) > MAX_NAME_LENGTH:
            raise SubscriberValidationError("Subscriber's name is too long.")
        if any(char in FORBIDDEN_CHARACTERS for char in value):
            raise SubscriberValidationError(
                "Subscriber's name contains illegal character."
            )
        return cls(value)

    def __str__(self) -> str:
        return self.value
