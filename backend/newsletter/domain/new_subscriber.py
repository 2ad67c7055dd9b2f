"""Sign-up request after validation."""

from dataclasses import dataclass

from .subscriber_email import SubscriberEmail
from .subscriber_name import SubscriberName


@dataclass(frozen=True)
class NewSubscriber:
    email: SubscriberEmail
    name: SubscriberName

    @classmethod
    def parse(cls, email: str, name: str) -> "NewSubscriber":
        return cls(email=SubscriberEmail.parse(email), name=SubscriberName.parse(name))
