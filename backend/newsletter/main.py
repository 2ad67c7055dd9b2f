"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse

from backend.newsletter.api.admin import router as admin_router
from backend.newsletter.api.health import get_health
from backend.newsletter.api.login import router as login_router
from backend.newsletter.api.subscriptions import router as subscriptions_router
from backend.newsletter.context import ApplicationContext, get_context
from backend.newsletter.exception_handlers import register_exception_handlers

logger = logging.getLogger(__name__)


def create_app(context: ApplicationContext | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        context: Collaborators to serve requests with. When omitted one is
            built from settings and closed on shutdown.

    Returns:
        Configured FastAPI application
    """
    owns_context = context is None
    context = context or ApplicationContext.from_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Application starting up")
        yield
        if owns_context:
            context.close()

    app = FastAPI(
        title="Newsletter API",
        description="Subscriber sign-up and newsletter publishing",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.context = context

    register_exception_handlers(app)

    @app.get("/healthz")
    def healthz(ctx: ApplicationContext = Depends(get_context)) -> Any:
        """Health check endpoint."""
        result = get_health(ctx.session_factory)
        status_code = 200 if result.status == "ok" else 503
        return JSONResponse(status_code=status_code, content=result.model_dump())

    app.include_router(login_router)
    app.include_router(admin_router)
    app.include_router(subscriptions_router)

    return app
