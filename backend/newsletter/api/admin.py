"""Admin endpoints for publishing newsletter issues."""

from html import escape
from uuid import UUID, uuid4

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field
from starlette.responses import HTMLResponse, Response

from backend.newsletter.context import ApplicationContext, get_context
from backend.newsletter.idempotency import IdempotencyKey
from backend.newsletter.issues import NewsletterContent, publish_issue
from backend.newsletter.security import SESSION_COOKIE

from .login import get_current_admin
from .responses import flash, redirect_to, render_page

router = APIRouter(prefix="/admin", tags=["admin"])

ACCEPTED_MESSAGE = "The newsletter issue has been accepted - emails will go out shortly."


class PublishNewsletterRequest(BaseModel):
    """Publish request payload."""

    title: str = Field(min_length=1)
    text_content: str = Field(min_length=1)
    html_content: str = Field(min_length=1)
    idempotency_key: str


@router.get("/newsletters", response_class=HTMLResponse)
def newsletter_form(
    request: Request,
    user_id: UUID = Depends(get_current_admin),
) -> Response:
    """Show pending flash messages and a fresh idempotency key."""
    key = escape(str(uuid4()))
    return render_page(
        request,
        "Publish a newsletter issue",
        "<p>POST title, text_content, html_content and idempotency_key "
        f"to this URL. Suggested key: <code>{key}</code></p>",
    )


@router.post("/newsletters")
def publish_newsletter(
    payload: PublishNewsletterRequest,
    user_id: UUID = Depends(get_current_admin),
    context: ApplicationContext = Depends(get_context),
) -> Response:
    """Publish an issue once per idempotency key.

    The key is validated before any transaction opens. Retries with the same
    key receive the stored acknowledgment byte for byte.
    """
    idempotency_key = IdempotencyKey.parse(payload.idempotency_key)
    content = NewsletterContent(
        title=payload.title,
        text_content=payload.text_content,
        html_content=payload.html_content,
    )
    return publish_issue(
        context.session_factory,
        user_id,
        idempotency_key,
        content,
        build_response=_accepted_response,
    )


def _accepted_response() -> Response:
    return flash(redirect_to("/admin/newsletters"), ACCEPTED_MESSAGE)


@router.post("/logout")
def logout(user_id: UUID = Depends(get_current_admin)) -> Response:
    response = flash(redirect_to("/login"), "You have successfully logged out.")
    response.delete_cookie(SESSION_COOKIE)
    return response
