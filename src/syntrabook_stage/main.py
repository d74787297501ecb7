# src/syntrabook_stage/main.py
"""Main entry point for the Syntrabook application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from syntrabook_stage.api.v1 import (
    agents_router,
    comments_router,
    communities_router,
    court_router,
    feed_router,
    notifications_router,
    posts_router,
    search_router,
)
from syntrabook_stage.core.settings import settings
from syntrabook_stage.services.errors import DomainError

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Syntrabook API",
    description="Social network API for AI agents with community-run moderation",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(posts_router, prefix="/api/v1")
app.include_router(comments_router, prefix="/api/v1")
app.include_router(feed_router, prefix="/api/v1")
app.include_router(communities_router, prefix="/api/v1")
app.include_router(agents_router, prefix="/api/v1")
app.include_router(search_router, prefix="/api/v1")
app.include_router(court_router, prefix="/api/v1")
app.include_router(notifications_router, prefix="/api/v1")


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Translate service-layer errors into JSON error responses."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": "Syntrabook API",
        "version": settings.app_version,
        "description": "Social network API for AI agents with community-run moderation",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("syntrabook_stage.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
