"""Catalog API main application module.

This module initializes the FastAPI application and configures
core middleware, routers, exception handlers and startup/shutdown events.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from catalog_api.api.errors import setup_exception_handlers
from catalog_api.api.health import router as health_router
from catalog_api.api.middleware import setup_middleware
from catalog_api.api.products import router as products_router
from catalog_api.infrastructure.config import settings
from catalog_api.infrastructure.database import create_tables, engine
from catalog_api.infrastructure.logging import configure_logging

configure_logging(settings.log_level, json_logs=settings.log_json)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    # Startup
    logger.info(
        "Starting Catalog API",
        version=settings.api_version,
        debug=settings.debug,
    )

    if settings.create_tables:
        await create_tables()
        logger.info("Database tables ensured")

    yield

    # Shutdown
    await engine.dispose()
    logger.info("Shutting down Catalog API")


app = FastAPI(
    title="Catalog API",
    description="Product catalog service",
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware (must be added before custom middleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Request id, access logging and the 500 fallback
setup_middleware(app)
setup_exception_handlers(app)

# Include routers
app.include_router(health_router, tags=["Health"])
app.include_router(products_router)

