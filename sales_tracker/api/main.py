"""
Sales Tracker API - Main Application

This module serves as the entry point for the Sales Tracker API,
configuring the FastAPI application with all routes, middleware,
and exception handlers.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from sales_tracker.api.routers import sales, reports, health
from sales_tracker.api.middlewares.logging_middleware import RequestLoggingMiddleware
from sales_tracker.api.middlewares.error_handler import add_exception_handlers
from sales_tracker.config.settings import settings
from sales_tracker.db.session import init_db

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create database tables on startup."""
    init_db()
    logger.info(f"{settings.APP_NAME} {settings.APP_VERSION} started")
    yield
    logger.info(f"{settings.APP_NAME} shutting down")


# Create FastAPI app
app = FastAPI(
    title=f"{settings.APP_NAME} API",
    description="API for recording sales, importing spreadsheets and reporting revenue",
    version=settings.APP_VERSION,
    docs_url=f"{settings.API_PREFIX}/docs",
    redoc_url=f"{settings.API_PREFIX}/redoc",
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add request logging middleware
app.add_middleware(RequestLoggingMiddleware)

# Add exception handlers
add_exception_handlers(app)

# Include routers
app.include_router(health.router, prefix=settings.API_PREFIX, tags=["Health"])
app.include_router(sales.router, prefix=f"{settings.API_PREFIX}/sales", tags=["Sales"])
app.include_router(reports.router, prefix=f"{settings.API_PREFIX}/reports", tags=["Reports"])


@app.get("/", tags=["Root"])
async def root():
    """API root endpoint"""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs_url": app.docs_url,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("sales_tracker.api.main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
