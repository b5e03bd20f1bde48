"""
VR Asset Catalog - Main Application Entry Point.

FastAPI application serving the catalog of VR/3D assets: asset records,
their formats and thumbnails, owner accounts, and filtered, paginated listings.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from vrcatalog import __version__
from vrcatalog.api.v1.router import api_router
from vrcatalog.config import get_settings
from vrcatalog.core.exceptions import AbortedException, CatalogAPIException, InternalException
from vrcatalog.services.metrics import MetricsMiddleware

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    logger.info(f"Starting {settings.PROJECT_NAME} {__version__}")
    logger.info(f"Storage backend: {settings.STORAGE_BACKEND}")
    logger.info(f"Dev mode (bypass auth): {settings.DEV_MODE}")

    from vrcatalog.db.session import engine, is_using_sqlite_fallback

    # Auto-create tables for SQLite (dev mode); PostgreSQL is migrated with alembic
    if is_using_sqlite_fallback():
        logger.warning("[DEV MODE] Using SQLite fallback database, creating tables")
        from vrcatalog.db.base import Base
        import vrcatalog.models  # noqa: F401  registers every table

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Development database ready")
    else:
        logger.info("Database: PostgreSQL")

    yield

    logger.info(f"Shutting down {settings.PROJECT_NAME}")


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="""
## VR Asset Catalog API

Stores and serves VR/3D assets for immersive clients.

### Features
- **Assets**: metadata, ordered formats (root element + resources), thumbnails, remix lineage
- **Visibility**: PRIVATE, UNLISTED and PUBLIC assets; private assets never leak
- **Listings**: filter (`category:animals,license:CREATIVE_COMMONS_BY`), `order_by`, keyset page tokens
- **Updates**: field-mask metadata updates and atomic format replacement (`:updateData`)
- **Accounts**: owner profiles, `me` shortcut
    """,
    version=__version__,
    openapi_tags=[
        {"name": "assets", "description": "Asset catalog operations"},
        {"name": "accounts", "description": "Account profiles and per-account listings"},
        {"name": "elements", "description": "Content element uploads"},
        {"name": "health", "description": "Service health checks"},
    ],
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(MetricsMiddleware)


@app.exception_handler(CatalogAPIException)
async def catalog_exception_handler(request: Request, exc: CatalogAPIException) -> JSONResponse:
    """Render catalog errors as {"error", "message", "details"?}."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies and parameters are invalid arguments."""
    errors = [
        {"loc": [str(part) for part in error.get("loc", ())], "msg": error.get("msg", "")}
        for error in exc.errors()
    ]
    logger.debug(f"Request validation failed on {request.url.path}: {errors}")
    return JSONResponse(
        status_code=400,
        content={
            "error": "invalid_argument",
            "message": "Request validation failed",
            "details": {"errors": errors},
        },
    )


@app.exception_handler(StaleDataError)
async def stale_data_handler(request: Request, exc: StaleDataError) -> JSONResponse:
    """A version conflict that surfaced outside the service layer (e.g. on commit)."""
    logger.info(f"Concurrent modification rejected on {request.url.path}: {exc}")
    error = AbortedException("The record was modified by another request; reload it and retry")
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception(f"Database error on {request.url.path}: {exc}")
    error = InternalException("The catalog store failed to process the request")
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Catch-all exception handler for unexpected errors.
    Logs the full error but returns a sanitized response.
    """
    logger.exception(f"Unexpected error: {exc}")
    error = InternalException("An unexpected error occurred")
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


app.include_router(api_router, prefix=settings.API_V1_PREFIX)


@app.get("/", include_in_schema=False)
async def root():
    return {
        "name": settings.PROJECT_NAME,
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
        "api": settings.API_V1_PREFIX,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "vrcatalog.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
