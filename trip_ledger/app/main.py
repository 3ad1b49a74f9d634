"""
FastAPI Application Entry Point.

Serves the federated daily trip transaction ledger.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from trip_ledger.app.core.config import settings
from trip_ledger.app.core.logging_config import setup_logging
from trip_ledger.app.core.observability import ObservabilityMiddleware
from trip_ledger.app.api.v1.router import router as api_v1_router
from trip_ledger.app.db.session import engine, Base
from trip_ledger.app.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)

# Import models to ensure they are registered with Base
from trip_ledger.app.models.fixed_transaction import FixedTransaction
from trip_ledger.app.models.adhoc_transaction import AdhocTransaction
from trip_ledger.app.models.audit_log import AuditLog

setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup/shutdown.
    
    Creates both store tables and the audit table on startup and disposes
    of the connection pool on shutdown.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()

# Initialize FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    debug=settings.debug,
    description="Daily trip transactions from the Fixed and Ad-hoc stores as one ledger",
    lifespan=lifespan,
)

app.add_middleware(ObservabilityMiddleware)

# Register global exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint.
    
    Returns:
        dict: Status and application information
    """
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.api_version,
    }


# Include API v1 router
app.include_router(api_v1_router, prefix=f"/{settings.api_version}")


@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint.
    
    Returns:
        dict: Welcome message and API documentation links
    """
    return {
        "message": "Welcome to the Trip Ledger API",
        "docs": "/docs",
        "health": "/health",
        "transactions": f"/{settings.api_version}/transactions",
    }
