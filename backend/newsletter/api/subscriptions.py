"""Subscriber sign-up and confirmation endpoints."""

import logging
import secrets
import string
from uuid import UUID, uuid4

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy import select, update
from sqlalchemy.orm import Session
from starlette.responses import Response

from backend.newsletter.context import ApplicationContext, get_context
from backend.newsletter.db.base import get_session
from backend.newsletter.db.models.subscription import (
    STATUS_CONFIRMED,
    STATUS_PENDING,
    Subscription,
    SubscriptionToken,
)
from backend.newsletter.domain import NewSubscriber
from backend.newsletter.email_client import EmailClient
from backend.newsletter.errors import UnknownSubscriptionTokenError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/subscriptions", tags=["subscriptions"])

TOKEN_LENGTH = 25
_TOKEN_ALPHABET = string.ascii_letters + string.digits


class SubscribeRequest(BaseModel):
    """Sign-up payload."""

    name: str
    email: str


@router.post("")
def subscribe(
    payload: SubscribeRequest,
    context: ApplicationContext = Depends(get_context),
) -> Response:
    """Register a pending subscriber and mail them a confirmation link."""
    new_subscriber = NewSubscriber.parse(payload.email, payload.name)
    subscription_token = generate_subscription_token()

    with get_session(context.session_factory) as session:
        subscriber_id = insert_subscriber(session, new_subscriber)
        store_token(session, subscriber_id, subscription_token)

    send_confirmation_email(
        context.email_client,
        new_subscriber,
        context.settings.app_base_url,
        subscription_token,
    )
    return Response(status_code=200)


@router.get("/confirm")
def confirm(
    subscription_token: str = Query(...),
    context: ApplicationContext = Depends(get_context),
) -> Response:
    """Mark the subscriber owning ``subscription_token`` as confirmed."""
    with get_session(context.session_factory) as session:
        subscriber_id = session.execute(
            select(SubscriptionToken.subscriber_id).where(
                SubscriptionToken.subscription_token == subscription_token
            )
        ).scalar_one_or_none()

        if subscriber_id is None:
            raise UnknownSubscriptionTokenError("Subscription token is invalid.")

        session.execute(
            update(Subscription)
            .where(Subscription.id == subscriber_id)
            .values(status=STATUS_CONFIRMED)
        )

    logger.info("subscriber_confirmed", extra={"subscriber_id": str(subscriber_id)})
    return Response(status_code=200)


def insert_subscriber(session: Session, new_subscriber: NewSubscriber) -> UUID:
    subscriber_id = uuid4()
    session.add(
        Subscription(
            id=subscriber_id,
            email=new_subscriber.email.value,
            name=new_subscriber.name.value,
            status=STATUS_PENDING,
        )
    )
    session.flush()
    return subscriber_id


def store_token(session: Session, subscriber_id: UUID, subscription_token: str) -> None:
    session.add(
        SubscriptionToken(
            subscription_token=subscription_token, subscriber_id=subscriber_id
        )
    )
    session.flush()


def send_confirmation_email(
    email_client: EmailClient,
    new_subscriber: NewSubscriber,
    base_url: str,
    subscription_token: str,
) -> None:
    confirmation_link = (
        f"{base_url.rstrip('/')}/subscriptions/confirm"
        f"?subscription_token={subscription_token}"
    )
    html_body = (
        "Welcome to our newsletter!<br />"
        f'Click <a href="{confirmation_link}">here</a> to confirm your subscription.'
    )
    plain_body = (
        "Welcome to our newsletter!\n"
        f"Visit {confirmation_link} to confirm your subscription."
    )
    email_client.send_email(new_subscriber.email, "Welcome!", html_body, plain_body)


def generate_subscription_token() -> str:
    """Random 25-character case-sensitive alphanumeric token."""
    return "".join(secrets.choice(_TOKEN_ALPHABET) for _ in range(TOKEN_LENGTH))
