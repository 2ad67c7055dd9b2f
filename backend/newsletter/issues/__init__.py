"""Newsletter issue publishing."""

from .publish import NewsletterContent, publish_issue

__all__ = ["NewsletterContent", "publish_issue"]
