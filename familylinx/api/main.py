"""
FastAPI application for FamilyLinX.

Serves the family tree and photo album API:
- Families, groups and members with photo galleries
- Slug pages with aggregated members, stats and photos
- Albums, calendar events and holiday import
- The admin overview and stored photo files
"""

import logging
import mimetypes
from contextlib import asynccontextmanager
from typing import BinaryIO, Iterator

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from familylinx import __version__
from familylinx.api.admin_routes import router as admin_router
from familylinx.api.album_routes import router as album_router
from familylinx.api.calendar_routes import router as calendar_router
from familylinx.api.dependencies import get_storage
from familylinx.api.family_routes import router as family_router
from familylinx.api.group_routes import router as group_router
from familylinx.api.member_routes import router as member_router
from familylinx.api.middleware import RequestLoggingMiddleware
from familylinx.api.models import AboutResponse, HealthResponse
from familylinx.api.page_routes import router as page_router
from familylinx.config import get_settings
from familylinx.database import check_connection, init_db
from familylinx.exceptions import FamilyLinxError, NotFoundError, StorageError
from familylinx.storage import BlobStorage

logger = logging.getLogger(__name__)


# =============================================================================
# Application Lifecycle
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting FamilyLinX API")
    init_db()
    logger.info("FamilyLinX API started")

    yield

    logger.info("Shutting down FamilyLinX API")


# =============================================================================
# FastAPI Application
# =============================================================================


app = FastAPI(
    title="FamilyLinX API",
    description="""
# FamilyLinX API

Family tree and photo album service.

## Structure

- A **family** owns a forest of **groups**; each group embeds its **members**
- A member can own a **sub-group** holding their own family
- Members carry **photo galleries**; group pages aggregate photos over the sub-tree

## Addressing

- **/pages/{root_slug}** - a family's root group page
- **/pages/{root_slug}/{group_slug}** - any group of that family

## Errors

Every error body is `{"error_type", "message", "retryable"}`.

- **400** - Invalid request
- **404** - Family, group, member, photo, album or event not found
- **409** - Slug in use, family exists, or the change would break the hierarchy
- **422** - Validation error
- **502** - Photo storage failure
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(RequestLoggingMiddleware)

app.include_router(family_router)
app.include_router(group_router)
app.include_router(member_router)
app.include_router(album_router)
app.include_router(calendar_router)
app.include_router(page_router)
app.include_router(admin_router)


# =============================================================================
# Exception Handlers
# =============================================================================


@app.exception_handler(FamilyLinxError)
async def familylinx_exception_handler(request, exc: FamilyLinxError):
    """Map domain errors to their status code."""
    if exc.status_code >= 500:
        logger.error(f"{exc.error_type}: {exc.message}", exc_info=exc.original_error)
    else:
        logger.info(f"{exc.error_type}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_type": exc.error_type,
            "message": exc.message,
            "retryable": exc.retryable,
        },
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request, exc: StarletteHTTPException):
    """Handle HTTP exceptions with consistent format."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_type": "http_error",
            "message": exc.detail,
            "retryable": exc.status_code >= 500,
        },
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error_type": "internal_error",
            "message": "An unexpected error occurred",
            "retryable": True,
        },
    )


# =============================================================================
# Health & Status Endpoints
# =============================================================================


@app.get("/health", response_model=HealthResponse, summary="Health check", tags=["System"])
def health_check():
    database_connected = check_connection()
    return HealthResponse(
        status="healthy" if database_connected else "unhealthy",
        version=__version__,
        database_connected=database_connected,
    )


@app.get("/about", response_model=AboutResponse, summary="About FamilyLinX", tags=["System"])
def about():
    return AboutResponse(
        name="FamilyLinX",
        version=__version__,
        description="Connect your family across generations with photos, stories and shared memories.",
        features=[
            "Family groups with nested sub-groups",
            "Member photo galleries",
            "Shareable slug URLs",
            "Photo and video albums",
            "Family calendar with holiday import",
        ],
    )


# =============================================================================
# Stored Files
# =============================================================================


STREAM_CHUNK_BYTES = 64 * 1024


def _iter_blob(fh: BinaryIO) -> Iterator[bytes]:
    with fh:
        while True:
            chunk = fh.read(STREAM_CHUNK_BYTES)
            if not chunk:
                break
            yield chunk


@app.get("/storage/{path:path}", summary="Serve a stored photo", tags=["System"])
def serve_stored_file(path: str, storage: BlobStorage = Depends(get_storage)):
    try:
        fh = storage.open(path)
    except StorageError as e:
        raise NotFoundError(f"File not found: {path}", original_error=e) from e

    media_type = mimetypes.guess_type(path)[0] or "application/octet-stream"
    return StreamingResponse(_iter_blob(fh), media_type=media_type)


# =============================================================================
# Run with Uvicorn
# =============================================================================


def run_server(host: str | None = None, port: int | None = None, reload: bool | None = None):
    """Run the API server with Uvicorn."""
    import uvicorn

    settings = get_settings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    uvicorn.run(
        "familylinx.api.main:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=settings.api_reload if reload is None else reload,
    )


if __name__ == "__main__":
    run_server()
