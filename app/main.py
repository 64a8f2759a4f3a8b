"""FastAPI application for the question paper generator."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, UTC
from typing import AsyncIterator, Dict, List, Union

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded  # type: ignore[import-not-found]

from app.config import get_settings
from app.middleware.logging import RequestLoggingMiddleware, configure_logging
from app.middleware.rate_limit import get_limiter, rate_limit_exceeded_handler
from app.routers import papers
from app.services.quota_selector import DEFAULT_QUOTA_TABLES

# Application metadata
VERSION = "1.0.0"
COMMIT_HASH = "development"  # Set by the build process

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan event handler for startup and shutdown."""
    # Raises ValidationError on invalid environment configuration
    settings = get_settings()
    configure_logging(settings.log_level)

    logger.info(f"Starting Question Paper Generator API v{VERSION}")
    logger.info(f"Paper types: {', '.join(DEFAULT_QUOTA_TABLES)}")
    logger.info(f"Max upload size: {settings.max_upload_size_mb}MB")
    if settings.selection_seed is not None:
        logger.warning("SELECTION_SEED is set; every request draws the same paper")

    yield

    logger.info("Shutting down Question Paper Generator API")


app = FastAPI(
    title="Question Paper Generator API",
    description="Builds randomized, quota-compliant exam papers from question spreadsheets",
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Add rate limiter to app state (required by slowapi)
app.state.limiter = get_limiter()
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# Add logging middleware (first, so it wraps all other middleware)
app.add_middleware(RequestLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origin_list,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)


@app.get("/health")
async def health_check() -> Dict[str, Union[str, List[str]]]:
    """
    Health check endpoint.

    The service keeps no state and has no backing services, so it is
    healthy whenever it can answer.
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "paper_types": list(DEFAULT_QUOTA_TABLES),
    }


@app.get("/version")
async def version_info() -> Dict[str, str]:
    """
    Get version information for the API.

    Returns:
        JSON with version number and commit hash.
    """
    return {
        "version": VERSION,
        "commit_hash": COMMIT_HASH,
    }


app.include_router(papers.router)
