"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from quotewise import __version__
from quotewise.api.router import api_router
from quotewise.config import settings
from quotewise.core.auth.middleware import CompanyContextMiddleware
from quotewise.core.database import async_engine
from quotewise.core.errors import register_exception_handlers
from quotewise.core.logging import RequestContextMiddleware, configure_logging


configure_logging()

logger = structlog.get_logger()

DEV_ORIGINS = ["http://localhost:3000", "http://localhost:5173"]


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info(
        "application_startup",
        environment=settings.environment,
        ai_configured=settings.openai_api_key is not None,
        revoke_token_family_on_reuse=settings.revoke_token_family_on_reuse,
    )
    yield
    await async_engine.dispose()
    logger.info("application_shutdown")


def create_app() -> FastAPI:
    """Build the API application.

    Interactive docs are only served outside production.
    """
    docs = not settings.is_production
    app = FastAPI(
        title=settings.app_name,
        description="Quoting assistant API with rotating session tokens and layered AI prompts",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if docs else None,
        redoc_url="/redoc" if docs else None,
        openapi_url="/openapi.json" if docs else None,
    )

    register_exception_handlers(app)

    # The last middleware added runs first: request context wraps identity,
    # so the request ID is bound before anything else logs.
    app.add_middleware(CompanyContextMiddleware)
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins or (DEV_ORIGINS if settings.is_development else []),
        # The refresh token cookie needs credentialed requests
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )

    app.include_router(api_router)
    return app


app = create_app()
