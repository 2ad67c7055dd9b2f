"""Client-supplied idempotency key."""

from dataclasses import dataclass

from backend.newsletter.errors import InvalidIdempotencyKeyError

MIN_KEY_LENGTH = 10
MAX_KEY_LENGTH = 50


@dataclass(frozen=True)
class IdempotencyKey:
    """A publish request's deduplication token, 10 to 50 characters long."""

    value: str

    @classmethod
    def parse(cls, value: str) -> "IdempotencyKey":
        """Validate a raw key.

        Args:
            value: Key as sent by the client

        Returns:
            IdempotencyKey wrapping ``value`` unchanged

        Raises:
            InvalidIdempotencyKeyError: If the key is blank or its length is
                outside [MIN_KEY_LENGTH, MAX_KEY_LENGTH]
        """
        if not value.strip():
            raise InvalidIdempotencyKeyError("The idempotency key cannot be blank.")
        if len(value) < MIN_KEY_LENGTH:
            raise InvalidIdempotencyKeyError(
                f"The idempotency key must be at least {MIN_KEY_LENGTH} characters long."
            )
        if len(value) > MAX_KEY_LENGTH:
            raise InvalidIdempotencyKeyError(
                f"The idempotency key must be at most {MAX_KEY_LENGTH} characters long."
            )
        return cls(value)

    def __str__(self) -> str:
        return self.value
