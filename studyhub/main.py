"""
FastAPI backend for StudyHub.

Upload study material, generate summaries, quizzes and flashcards from it,
and track study activity.

This main file handles app initialization and router mounting.
All endpoints are organized in the routers/ directory.
"""

import logging
import os
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from .config import Settings, settings
from .content_generator import ContentGenerator, build_content_generator
from .file_processor import FileProcessor
from .rate_limit import limiter
from .repository import InMemoryStudyRepository
from .repository_interface import StudyRepository
from .routers import documents, flashcards, quizzes, study, summaries, users

# Logging setup (configurable via environment variable)
logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))
logger = logging.getLogger(__name__)

# =============================================================================
# Exception Handlers
# =============================================================================

async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed or schema-violating request bodies are client errors (400)."""
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid request", "errors": jsonable_encoder(exc.errors())},
    )


async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    """
    Custom handler for rate limit exceeded errors.
    Includes Retry-After header for better client handling.
    """
    retry_after = 60
    return JSONResponse(
        status_code=429,
        content={
            "detail": str(exc.detail),
            "error": "rate_limit_exceeded",
            "retry_after_seconds": retry_after,
        },
        headers={"Retry-After": str(retry_after)},
    )

# =============================================================================
# Application Factory
# =============================================================================

def create_app(
    app_settings: Optional[Settings] = None,
    repository: Optional[StudyRepository] = None,
    content_generator: Optional[ContentGenerator] = None,
) -> FastAPI:
    """
    Build a StudyHub application.

    Each call gets its own repository, so separate apps never share records.

    Args:
        app_settings: Settings to use (defaults to the global settings)
        repository: Entity store (defaults to a fresh in-memory store)
        content_generator: Generator (defaults to the configured backend)

    Returns:
        Configured FastAPI app
    """
    cfg = app_settings or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Lifespan event handler for FastAPI application.
        Handles startup and shutdown events.
        """
        app.state.file_processor.ensure_upload_dir()
        logger.info(f"Upload directory ready: {app.state.file_processor.upload_dir}")

        yield  # Application runs here

        logger.info("Application shutting down")

    app = FastAPI(
        title="StudyHub",
        description="Study assistant: summaries, quizzes and flashcards from your documents",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.settings = cfg
    app.state.repository = repository or InMemoryStudyRepository()
    app.state.content_generator = content_generator or build_content_generator(cfg)
    app.state.file_processor = FileProcessor(cfg.upload_dir, cfg.max_upload_bytes)

    # Rate limiting (disabled in test mode)
    limiter.enabled = not cfg.testing
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    if cfg.testing:
        logger.info("Rate limiting disabled (test mode)")

    # CORS
    origins = cfg.cors_origins
    if origins == ["*"] and cfg.is_production:
        logger.warning(
            "CORS allows ALL origins (*) in production. "
            "Set STUDYHUB_ALLOWED_ORIGINS to specific domains."
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request ID middleware
    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        """
        Add unique request ID to each request for tracing.
        Enables debugging by tracking requests through logs.
        """
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)

        response.headers["X-Request-ID"] = request_id
        return response

    # =========================================================================
    # Mount Routers
    # =========================================================================

    app.include_router(documents.router)
    app.include_router(summaries.router)
    app.include_router(quizzes.router)
    app.include_router(flashcards.router)
    app.include_router(study.router)
    app.include_router(users.router)

    # =========================================================================
    # Health Check Endpoint
    # =========================================================================

    @app.get("/health", tags=["health"])
    async def health_check(request: Request):
        """
        Health check endpoint.

        Returns record counts and dependency status for monitoring.
        """
        state = request.app.state
        health_data = {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "statistics": await state.repository.get_counts(),
            "dependencies": {
                "generator": type(state.content_generator).__name__,
            },
        }

        upload_dir = state.file_processor.upload_dir
        try:
            health_data["dependencies"]["upload_dir_writable"] = (
                upload_dir.is_dir() and os.access(upload_dir, os.W_OK)
            )
        except OSError as e:
            health_data["dependencies"]["upload_dir_writable"] = False
            logger.error(f"Failed to check upload directory: {e}")

        if not health_data["dependencies"]["upload_dir_writable"]:
            health_data["status"] = "degraded"

        return health_data

    return app


app = create_app()
