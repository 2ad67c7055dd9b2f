"""ORM models for database tables."""

from .idempotency import IdempotencyRecord
from .newsletter_issue import IssueDeliveryTask, NewsletterIssue
from .subscription import Subscription, SubscriptionToken
from .user import User

__all__ = [
    "User",
    "Subscription",
    "SubscriptionToken",
    "IdempotencyRecord",
    "NewsletterIssue",
    "IssueDeliveryTask",
]
