"""Finessee Catalog API main application module.

This module initializes the FastAPI application and configures
core middleware, routers, and startup/shutdown events.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from finessee.api.auth import router as auth_router
from finessee.api.feedback import router as feedback_router
from finessee.api.filters import router as filters_router
from finessee.api.health import router as health_router
from finessee.api.middleware import setup_middleware
from finessee.api.products import router as products_router
from finessee.api.users import router as users_router
from finessee.api.wishlist import router as wishlist_router
from finessee.catalog.sample_data import seed_sample_data
from finessee.domain.exceptions import DomainError
from finessee.infrastructure.config import settings
from finessee.infrastructure.logging_config import configure_logging
from finessee.infrastructure.storage import get_storage

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    configure_logging(settings)
    storage = get_storage()
    logger.info(
        "Starting Finessee Catalog API",
        version=settings.api_version,
        debug=settings.debug,
        storage=storage.name,
    )

    await storage.startup()
    if settings.seed_sample_data:
        async with storage.session() as repos:
            await seed_sample_data(repos)

    yield

    logger.info("Shutting down Finessee Catalog API")
    await storage.shutdown()


app = FastAPI(
    title="Finessee Catalog API",
    description="Product catalog with faceted search, wishlists and feedback",
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

# Setup custom middleware (request ID, sessions)
setup_middleware(app)

# Include routers
app.include_router(health_router, tags=["Health"])
app.include_router(auth_router)
app.include_router(products_router)
app.include_router(filters_router)
app.include_router(wishlist_router)
app.include_router(users_router)
app.include_router(feedback_router)


# ============================================================================
# Custom Exception Handlers
# ============================================================================


def error_response(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    details: list[dict[str, str | None]] | None = None,
) -> JSONResponse:
    """Build the standard error envelope."""
    return JSONResponse(
        status_code=status_code,
        content={
            "error_code": error_code,
            "message": message,
            "details": details or [],
            "request_id": getattr(request.state, "request_id", None),
        },
    )


@app.exception_handler(DomainError)
async def domain_exception_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Handle domain errors with their own status and code."""
    if exc.status_code >= 500:
        logger.error("Domain error", error_code=exc.error_code, error=exc.message)
    details = [{"field": key, "message": str(value)} for key, value in exc.details.items()]
    return error_response(request, exc.status_code, exc.error_code, exc.message, details)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed request bodies as 400 VALIDATION_ERROR."""
    details = [
        {
            "field": ".".join(str(part) for part in error["loc"][1:]) or None,
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    return error_response(request, 400, "VALIDATION_ERROR", "Invalid request", details)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions with consistent format."""
    detail = exc.detail
    if isinstance(detail, dict):
        error_code = detail.get("error_code", "ERROR")
        message = detail.get("message", str(detail))
        details = detail.get("details", [])
    else:
        error_code = "ERROR"
        message = str(detail)
        details = []
    return error_response(request, exc.status_code, error_code, message, details)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions with consistent format."""
    logger.exception(
        "Unhandled exception in handler",
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )
    return error_response(request, 500, "INTERNAL_ERROR", "An internal error occurred")
