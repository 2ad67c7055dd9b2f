"""Validated subscriber email address."""

from dataclasses import dataclass

from email_validator import EmailNotValidError, validate_email

from backend.newsletter.errors import SubscriberValidationError


@dataclass(frozen=True)
class SubscriberEmail:
    """An email address that passed syntax validation.

    Addresses read back from the database are parsed again before use: rows
    written before a validation rule existed may not satisfy it.
    """

    value: str

    @classmethod
    def parse(cls, value: str) -> "SubscriberEmail":
        """Validate ``value`` and wrap it.

        Raises:
            SubscriberValidationError: If the address is not well-formed.
        """
        if not value or not value.strip():
            raise SubscriberValidationError("Subscriber's email is empty.")
        if "@" not in value:
            raise SubscriberValidationError("Subscriber's email is missing @ symbol.")

        local_part, _, domain = value.rpartition("@")
        if not domain:
            raise SubscriberValidationError("Subscriber's email is missing domain.")
        if not local_part:
            raise SubscriberValidationError("Subscriber's email is missing subject.")

        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError as e:
            raise SubscriberValidationError(
                f"Subscriber's email format is incorrect: {e}"
            ) from e

        return cls(value)

    def __str__(self) -> str:
        return self.value
