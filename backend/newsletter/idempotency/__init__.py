"""Idempotency package."""

from .key import IdempotencyKey
from .store import (
    NextAction,
    ReturnSavedResponse,
    StartProcessing,
    get_saved_response,
    save_response,
    try_processing,
)

__all__ = [
    "IdempotencyKey",
    "NextAction",
    "ReturnSavedResponse",
    "StartProcessing",
    "get_saved_response",
    "save_response",
    "try_processing",
]
