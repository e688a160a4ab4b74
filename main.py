"""
Ledgerline Sales & Accounts - FastAPI Application Entry Point

This is the main entry point for the FastAPI application.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ledgerline import __version__
from ledgerline.config import settings
from ledgerline.database import init_db, close_db
from ledgerline.utils.error_handling import setup_exception_handlers

# Configure logging
logging.basicConfig(
    level=logging.INFO if not settings.debug else logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


API_PREFIX = f"/api/{settings.api_version}/sa"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI.
    Handles startup and shutdown events.
    """
    # Startup
    logger.info(f"Starting {settings.app_name}...")
    logger.info(f"Environment: {settings.app_env}")

    # Initialize database (dev only - use migrations in production)
    if settings.is_development:
        await init_db()
        logger.info("Database tables initialized")

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.app_name}...")
    await close_db()
    logger.info("Database connections closed")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="Double-entry bookkeeping and stock ledger for the procure-to-pay and order-to-cash cycle",
    version=__version__,
    docs_url="/api/docs" if settings.is_development else None,
    redoc_url="/api/redoc" if settings.is_development else None,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ===========================================
# GLOBAL ERROR HANDLERS
# ===========================================

setup_exception_handlers(app)


# ===========================================
# API ROUTES
# ===========================================

@app.get("/api")
async def api_info():
    """API information endpoint."""
    return {
        "name": settings.app_name,
        "version": __version__,
        "status": "running",
        "environment": settings.app_env,
        "api_docs": "/api/docs" if settings.is_development else "disabled",
        "endpoints": {
            "masters": f"{API_PREFIX}/masters",
            "procurement": f"{API_PREFIX}/procurement",
            "sales": f"{API_PREFIX}/sales",
            "payments": f"{API_PREFIX}/payments",
            "inventory": f"{API_PREFIX}/inventory",
            "accounting": f"{API_PREFIX}/accounting",
        },
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": __version__,
    }


# ===========================================
# INCLUDE ROUTERS
# ===========================================

from ledgerline.routers import (  # noqa: E402
    masters, procurement, sales, payments, inventory, accounting,
)

app.include_router(masters.router, prefix=f"{API_PREFIX}/masters", tags=["Masters"])
app.include_router(procurement.router, prefix=f"{API_PREFIX}/procurement", tags=["Procurement"])
app.include_router(sales.router, prefix=f"{API_PREFIX}/sales", tags=["Sales"])
app.include_router(payments.router, prefix=f"{API_PREFIX}/payments", tags=["Payments"])
app.include_router(inventory.router, prefix=f"{API_PREFIX}/inventory", tags=["Inventory"])
app.include_router(accounting.router, prefix=f"{API_PREFIX}/accounting", tags=["Accounting"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
