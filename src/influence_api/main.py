"""FastAPI application factory.

Creates the FastAPI app with lifespan management, exception handlers,
and OpenAPI metadata.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from influence_api.core.config import get_settings
from influence_api.core.logging import setup_logging
from influence_api.lib.sway_client import TokenCache


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifecycle: logging and the shared Sway token cache."""
    settings = get_settings()
    setup_logging(settings.log_level, log_dir=settings.log_dir)
    app.state.token_cache = TokenCache()
    if not settings.enhancements_configured:
        logger.info("Sway API enhancements disabled, serving static metrics only")

    yield

    app.state.token_cache.clear()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="Influence API",
        description="Leader influence analytics: verified voters, ballot leverage, and prioritized actions",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Register exception handlers
    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"detail": str(exc)},
        )

    # Register middleware and routers
    from influence_api.api.router import create_router, setup_middleware

    setup_middleware(app, settings)
    app.include_router(create_router(settings))

    return app
