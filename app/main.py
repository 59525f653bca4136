"""FastAPI application entry point.

Catalog taxonomy service: product categories and characteristic groups.
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app import __version__
from app.config import settings
from app.core.errors import TaxonomyError
from app.infra.cache import get_cache
from app.infra.database import close_db_engine, create_schema, verify_db_connection
from app.infra.logging import bind_request_context, get_logger, setup_logging

# Import routers
from app.api.routes.categories import router as categories_router
from app.api.routes.characteristic_groups import router as characteristic_groups_router
from app.api.routes.health import router as health_router

# Setup logging first
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler.

    Startup:
    - Create tables in dev
    - Verify database connection

    Shutdown:
    - Close database connections
    - Drop cached listings
    """
    logger.info("Catalog taxonomy service starting", environment=settings.environment)

    if settings.environment == "dev":
        try:
            await create_schema()
        except Exception as e:
            logger.warning("Failed to create schema", error=str(e))

    db_ok = await verify_db_connection()
    if not db_ok:
        logger.warning("Database connection failed - will retry on first request")

    yield

    logger.info("Catalog taxonomy service shutting down")
    await close_db_engine()
    await get_cache().clear()
    logger.info("Cleanup complete")


# Create FastAPI app
app = FastAPI(
    title="Catalog Taxonomy",
    description="Category and characteristic-group trees for the storefront catalog",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs" if settings.environment == "dev" else None,
    redoc_url=None,
)

# CORS middleware (mainly for the local admin UI)
if settings.environment == "dev":
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Bind a request id to all logs of the request and log its outcome."""
    request_id = bind_request_context(
        request.headers.get("X-Request-ID"),
        method=request.method,
        path=request.url.path,
    )
    started = time.perf_counter()

    response = await call_next(request)

    duration_ms = int((time.perf_counter() - started) * 1000)
    response.headers["X-Request-ID"] = request_id
    logger.info("Request handled", status_code=response.status_code, duration_ms=duration_ms)
    return response


# =============================================================================
# Exception Handlers
# =============================================================================


@app.exception_handler(TaxonomyError)
async def taxonomy_exception_handler(request: Request, exc: TaxonomyError) -> JSONResponse:
    """Render taxonomy failures with their stable classification code."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed bodies, ids and query strings as VALIDATION_ERROR."""
    errors = [
        {"loc": [str(part) for part in error["loc"]], "msg": error["msg"]}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "error": "Request validation failed",
            "code": "VALIDATION_ERROR",
            "details": {"errors": errors},
        },
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions."""
    logger.error(
        "Unhandled exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        exc_info=True,
    )

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal server error",
            "code": "INTERNAL_ERROR",
            "details": {"error_type": type(exc).__name__},
        },
    )


# =============================================================================
# Include Routers
# =============================================================================

app.include_router(health_router, tags=["Health"])
app.include_router(categories_router, prefix="/api/categories", tags=["Categories"])
app.include_router(
    characteristic_groups_router,
    prefix="/api/characteristic-groups",
    tags=["Characteristic groups"],
)


@app.get("/")
async def root() -> dict:
    """Root endpoint - basic service info."""
    return {
        "service": "Catalog Taxonomy",
        "version": __version__,
        "environment": settings.environment,
    }
