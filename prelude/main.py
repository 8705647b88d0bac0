"""
FastAPI application entry point.

Initializes FastAPI app, registers routers, adds middleware, and configures lifespan.

Dependencies: fastapi, prelude.api, prelude.observability, prelude.configs
System role: Application initialization and configuration
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from prelude import __version__
from prelude.api import api_router
from prelude.boundary.db import create_tables
from prelude.configs import get_settings
from prelude.observability.log_utils import log_exception_with_context
from prelude.observability.logger import configure_logging
from prelude.observability.middleware import (
    CorrelationMiddleware,
    RequestLoggingMiddleware,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Configures logging and makes sure the schema exists before serving.
    """
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("Application startup: logging configured")

    try:
        await create_tables()
    except Exception as e:
        log_exception_with_context(
            logger,
            "Failed to create database tables",
            e,
            environment=settings.environment,
        )
        raise
    logger.info("Application startup complete: database ready")

    yield

    logger.info("Application shutdown")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        FastAPI: Configured application instance
    """
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        description="Event-sourced capture and replay of student writing sessions",
        version=__version__,
        lifespan=lifespan,
    )

    # Add observability middleware (added first = last to execute)
    app.add_middleware(CorrelationMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix=settings.api_prefix)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "prelude.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
