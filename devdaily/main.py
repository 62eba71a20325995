"""DevDaily catalog main application module.

This module initializes the FastAPI application and configures
core middleware, routers, and startup/shutdown events.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from devdaily.admin.catalog import router as admin_catalog_router
from devdaily.admin.products import router as admin_products_router
from devdaily.admin.session import router as admin_session_router
from devdaily.admin.users import router as admin_users_router
from devdaily.api.auth import router as auth_router
from devdaily.api.categories import router as categories_router
from devdaily.api.dashboard import router as dashboard_router
from devdaily.api.health import router as health_router
from devdaily.api.middleware import setup_middleware
from devdaily.api.products import router as products_router
from devdaily.application.admin_service import AdminService
from devdaily.application.demo_catalog import seed_demo_catalog
from devdaily.htmx.catalog import router as htmx_catalog_router
from devdaily.htmx.products import router as htmx_products_router
from devdaily.infrastructure.config import settings
from devdaily.infrastructure.database import create_tables
from devdaily.infrastructure.logging import configure_logging
from devdaily.web.errors import setup_exception_handlers
from devdaily.web.routes import router as web_router

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
    configure_logging(settings.log_level, settings.log_json)
    logger.info(
        "Starting DevDaily catalog",
        version=settings.api_version,
        environment=settings.environment,
        storage=settings.storage_backend,
    )

    if settings.uses_database:
        await create_tables()

    admin = AdminService().ensure_default_admin()
    if admin is not None:
        logger.warning("Default admin password in use; change it after the first login", username=admin.username)

    if settings.seed_demo_data and not settings.uses_database:
        await seed_demo_catalog()

    yield

    # Shutdown
    logger.info("Shutting down DevDaily catalog")


app = FastAPI(
    title="DevDaily Catalog",
    description="Price-comparison storefront, back office and JSON API",
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Setup custom middleware (request ID, admin auth, error handling)
setup_middleware(app)

setup_exception_handlers(app)

Path(settings.upload_root).mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.upload_root), name="uploads")

# Include routers
app.include_router(health_router, tags=["Health"])
app.include_router(auth_router)
app.include_router(products_router)
app.include_router(categories_router)
app.include_router(dashboard_router)
app.include_router(htmx_products_router)
app.include_router(htmx_catalog_router)
app.include_router(admin_session_router)
app.include_router(admin_products_router)
app.include_router(admin_catalog_router)
app.include_router(admin_users_router)
app.include_router(web_router)
