"""Response helpers shared by the HTML-facing routes."""

from html import escape

from fastapi import Request, status
from starlette.responses import HTMLResponse, Response

FLASH_COOKIE = "_flash"


def redirect_to(location: str) -> Response:
    """303 See Other to ``location``."""
    return Response(status_code=status.HTTP_303_SEE_OTHER, headers={"Location": location})


def flash(response: Response, message: str) -> Response:
    """Attach a one-shot message shown by the next rendered page."""
    response.set_cookie(FLASH_COOKIE, message, httponly=True, samesite="strict")
    return response


def render_page(request: Request, title: str, body_html: str) -> HTMLResponse:
    """Render a bare page, consuming any pending flash message."""
    message = request.cookies.get(FLASH_COOKIE)
    flash_html = f"<p><i>{escape(message)}</i></p>" if message else ""
    response = HTMLResponse(
        f"<!DOCTYPE html><html><head><title>{escape(title)}</title></head>"
        f"<body>{flash_html}{body_html}</body></html>"
    )
    if message:
        response.delete_cookie(FLASH_COOKIE)
    return response
