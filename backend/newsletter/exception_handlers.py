"""Exception handlers mapping errors to HTTP responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.responses import Response

from backend.newsletter.errors import AppError, ErrorKind, status_code_for

logger = logging.getLogger(__name__)


async def app_error_handler(request: Request, exc: AppError) -> Response:
    """Render an AppError using its kind's status code."""
    status_code = status_code_for(exc.kind)

    if exc.kind is ErrorKind.UNAUTHENTICATED:
        return Response(status_code=status_code, headers={"Location": "/login"})

    if status_code >= 500:
        logger.error(
            "Request failed",
            exc_info=exc,
            extra={"path": request.url.path, "kind": exc.kind.value},
        )
    else:
        logger.info(
            "Request rejected",
            extra={"path": request.url.path, "kind": exc.kind.value},
        )

    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "kind": exc.kind.value},
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed request bodies are a 400, like other validation failures."""
    return JSONResponse(
        status_code=status_code_for(ErrorKind.VALIDATION),
        content={
            "detail": jsonable_encoder(exc.errors()),
            "kind": ErrorKind.VALIDATION.value,
        },
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(
        "Database error",
        exc_info=exc,
        extra={"path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "kind": ErrorKind.DATABASE.value},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
