"""Error taxonomy and HTTP status mapping.

Every failure the service surfaces is an ``AppError`` tagged with an
``ErrorKind``. The HTTP layer never inspects exception classes or messages to
pick a status code; it asks ``status_code_for(error.kind)``.
"""

from enum import Enum

from fastapi import status


class ErrorKind(str, Enum):
    """Closed set of error categories."""

    VALIDATION = "validation"
    UNAUTHENTICATED = "unauthenticated"
    INVALID_CREDENTIALS = "invalid_credentials"
    INVALID_TOKEN = "invalid_token"
    NOT_FOUND = "not_found"
    UPSTREAM = "upstream"
    DATABASE = "database"
    INVARIANT = "invariant"


_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UNAUTHENTICATED: status.HTTP_303_SEE_OTHER,
    ErrorKind.INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.INVALID_TOKEN: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.UPSTREAM: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.DATABASE: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.INVARIANT: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_code_for(kind: ErrorKind) -> int:
    """Return the HTTP status code for an error kind."""
    return _STATUS_BY_KIND[kind]


class AppError(Exception):
    """Base class for all application errors."""

    kind: ErrorKind = ErrorKind.INVARIANT

    def __init__(self, message: str, *, kind: ErrorKind | None = None) -> None:
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind

    @property
    def status_code(self) -> int:
        return status_code_for(self.kind)


class InvalidIdempotencyKeyError(AppError):
    """Idempotency key is blank, too short or too long."""

    kind = ErrorKind.VALIDATION


class SubscriberValidationError(AppError):
    """Subscriber name or email failed validation."""

    kind = ErrorKind.VALIDATION


class InvalidUsernameError(AppError):
    kind = ErrorKind.INVALID_CREDENTIALS


class InvalidPasswordError(AppError):
    kind = ErrorKind.INVALID_CREDENTIALS


class AuthenticationRequiredError(AppError):
    """Admin route requested without a valid session."""

    kind = ErrorKind.UNAUTHENTICATED


class UnknownSubscriptionTokenError(AppError):
    kind = ErrorKind.INVALID_TOKEN


class IssueNotFoundError(AppError):
    kind = ErrorKind.NOT_FOUND


class EmailDeliveryError(AppError):
    """The email API rejected the message, failed or timed out."""

    kind = ErrorKind.UPSTREAM


class IdempotencyRecordNotFoundError(AppError):
    """A key conflicted on insert but no completed response was stored.

    Signals that a caller started processing a key and never saved the
    response for it.
    """

    kind = ErrorKind.INVARIANT
