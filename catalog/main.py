"""
FastAPI application for the Local Library catalog.
"""

import time
from contextlib import asynccontextmanager
from datetime import datetime

import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.gzip import GZipMiddleware
from motor.motor_asyncio import AsyncIOMotorClient
from starlette.exceptions import HTTPException as StarletteHTTPException

from catalog import dependencies
from catalog.config import config
from catalog.database import CatalogDatabaseService
from catalog.logger import setup_logging
from catalog.models import HealthResponse
from catalog.routers import authors, bookinstances, books, genres, home
from catalog.templating import render

# Setup logging
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    setup_logging(
        log_level=config.log_level,
        log_format=config.log_format,
        log_file=config.get_log_file_path(),
        debug=config.debug
    )
    logger.info("Starting Local Library catalog")

    client = AsyncIOMotorClient(config.mongodb_url)
    try:
        database = client[config.mongodb_database]

        await database.command("ping")
        logger.info("Database connection established", database=config.mongodb_database)

        dependencies.db_service = CatalogDatabaseService(database)
        await dependencies.db_service.ensure_indexes()

    except Exception as e:
        logger.error("Failed to connect to database", error=str(e))
        client.close()
        raise

    yield

    logger.info("Shutting down Local Library catalog")
    dependencies.db_service = None
    client.close()


app = FastAPI(
    title=config.app_title,
    description="Catalog management for a local library: books, authors, genres and copies.",
    version=config.app_version,
    lifespan=lifespan
)

app.add_middleware(GZipMiddleware, minimum_size=config.gzip_minimum_size)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log method, path, status and duration of every request."""
    started = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "Request handled",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round((time.perf_counter() - started) * 1000, 2)
    )
    return response


# Exception handlers
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render HTTP errors, including unknown routes, as the error page."""
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("HTTP error", status_code=exc.status_code, detail=exc.detail, path=request.url.path)
    return render(request, "error.html", {
        "title": "Error",
        "message": exc.detail,
        "status_code": exc.status_code,
        "detail": None,
    }, status_code=exc.status_code)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Render unexpected errors, such as database failures, with status 500."""
    logger.error("Unhandled exception", error=str(exc), path=request.url.path, exc_info=exc)
    return render(request, "error.html", {
        "title": "Error",
        "message": "Internal server error",
        "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR,
        "detail": str(exc) if config.debug else None,
    }, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


# Health check endpoint
@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Health check endpoint."""
    db_status = "unavailable"
    if dependencies.db_service:
        health_info = await dependencies.db_service.health_check()
        db_status = health_info.get("status", "unknown")

    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        timestamp=datetime.utcnow(),
        version=config.app_version,
        database_status=db_status
    )


app.include_router(home.router)
app.include_router(authors.router)
app.include_router(genres.router)
app.include_router(books.router)
app.include_router(bookinstances.router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "catalog.main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="info"
    )
