"""Admin login endpoints and the session dependency."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel
from sqlalchemy.orm import Session
from starlette.responses import HTMLResponse, Response

from backend.newsletter.context import ApplicationContext, get_context, get_db_session
from backend.newsletter.errors import (
    AuthenticationRequiredError,
    InvalidPasswordError,
    InvalidUsernameError,
)
from backend.newsletter.security import (
    SESSION_COOKIE,
    create_session_token,
    read_session_token,
    validate_credentials,
)

from .responses import flash, redirect_to, render_page

__all__ = ["get_current_admin", "router"]

logger = logging.getLogger(__name__)

router = APIRouter(tags=["authentication"])


class LoginRequest(BaseModel):
    """Login request payload."""

    username: str
    password: str


def get_current_admin(
    request: Request,
    context: ApplicationContext = Depends(get_context),
) -> UUID:
    """Resolve the logged-in admin from the session cookie.

    Raises:
        AuthenticationRequiredError: No session cookie, or it is invalid or
            expired
    """
    token = request.cookies.get(SESSION_COOKIE)
    user_id = read_session_token(token, context.settings) if token else None
    if user_id is None:
        raise AuthenticationRequiredError("The user has not logged in.")
    return user_id


@router.get("/login", response_class=HTMLResponse)
def login_form(request: Request) -> Response:
    return render_page(
        request,
        "Login",
        "<p>POST a JSON body with <code>username</code> and "
        "<code>password</code> to this URL to log in.</p>",
    )


@router.post("/login")
def login(
    payload: LoginRequest,
    context: ApplicationContext = Depends(get_context),
    session: Session = Depends(get_db_session),
) -> Response:
    """Start an admin session.

    Wrong credentials send the user back to the login page with the reason
    as a flash message.
    """
    try:
        user_id = validate_credentials(session, payload.username, payload.password)
    except (InvalidUsernameError, InvalidPasswordError) as e:
        return flash(redirect_to("/login"), e.message)

    logger.info("admin_logged_in", extra={"user_id": str(user_id)})
    response = redirect_to("/admin/newsletters")
    response.set_cookie(
        SESSION_COOKIE,
        create_session_token(user_id, context.settings),
        httponly=True,
        samesite="strict",
    )
    return response
