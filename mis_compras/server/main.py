"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS,
request logging), registers the exception handlers and includes all API
routers. It serves as the root of the web server.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mis_compras.core.database import async_session_maker, init_db
from mis_compras.core.logging_config import get_logger, setup_logging

from .api.v1 import (
    adjustments,
    admin,
    auth,
    budgets,
    health,
    invoices,
    notifications,
    payments,
    reports,
    requirements,
    users,
)
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .middleware import RequestLoggingMiddleware
from .services.users import UserService

# Initialize logging
setup_logging()
logger = get_logger(__name__)


async def bootstrap_admin() -> None:
    """Create the ADMIN account from DEFAULT_ADMIN_EMAIL / DEFAULT_ADMIN_PASSWORD when both are set."""
    if not (settings.default_admin_email and settings.default_admin_password):
        return
    async with async_session_maker() as session:
        await UserService(session).ensure_default_admin(settings.default_admin_email, settings.default_admin_password)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Handles startup and shutdown events for the FastAPI application.
    """
    # Startup
    try:
        logger.info("Starting up Mis Compras Server...")
        await init_db()
        await bootstrap_admin()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    yield

    # Shutdown
    logger.info("Shutting down Mis Compras Server...")


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    Mis Compras Server API

    Procurement and budget management: purchase requirements and their approval workflow,
    budgets and adjustments, payments, supplier invoices with 3-way matching, and reports.
    """,
    version=constant.VERSION,
    openapi_url=f"{constant.API_V1_STR}/openapi.json",
    docs_url=f"{constant.API_V1_STR}/docs",
    redoc_url=f"{constant.API_V1_STR}/redoc",
    lifespan=lifespan,
)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.origins,
    allow_credentials=settings.cors.allow_credentials,
    allow_methods=settings.cors.allow_methods,
    allow_headers=settings.cors.allow_headers,
)

setup_exception_handlers(app)

app.include_router(health.router, tags=["health"])
app.include_router(auth.router, prefix=f"{constant.API_V1_STR}/auth", tags=["auth"])
app.include_router(users.router, prefix=f"{constant.API_V1_STR}/users", tags=["users"])
app.include_router(admin.router, prefix=f"{constant.API_V1_STR}/admin", tags=["admin"])
app.include_router(budgets.router, prefix=f"{constant.API_V1_STR}/budgets", tags=["budgets"])
app.include_router(adjustments.router, prefix=f"{constant.API_V1_STR}/adjustments", tags=["adjustments"])
app.include_router(requirements.router, prefix=f"{constant.API_V1_STR}/requirements", tags=["requirements"])
app.include_router(payments.router, prefix=f"{constant.API_V1_STR}/payments", tags=["payments"])
app.include_router(invoices.router, prefix=f"{constant.API_V1_STR}/invoices", tags=["invoices"])
app.include_router(notifications.router, prefix=f"{constant.API_V1_STR}/notifications", tags=["notifications"])
app.include_router(reports.router, prefix=f"{constant.API_V1_STR}/reports", tags=["reports"])
