# src/pollfeed/main.py
"""Main entry point for the Pollfeed application."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from pollfeed.api.v1 import feed_router, install_error_handlers, posts_router, users_router
from pollfeed.core.settings import settings
from pollfeed.services.trending import TrendingScoreWorker

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Social polling API with a personalized, trending-aware feed",
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

install_error_handlers(app)

# Include API routers
app.include_router(posts_router, prefix="/api/v1")
app.include_router(feed_router, prefix="/api/v1")
app.include_router(users_router, prefix="/api/v1")


@app.on_event("startup")
async def on_startup() -> None:
    if settings.trending_job_enabled:
        worker = TrendingScoreWorker()
        await worker.start()
        app.state.trending_worker = worker
        logger.info(
            "Trending score worker started (interval %.0fs)",
            worker.interval_seconds,
        )
    else:
        app.state.trending_worker = None


@app.on_event("shutdown")
async def on_shutdown() -> None:
    worker: TrendingScoreWorker | None = getattr(app.state, "trending_worker", None)
    if worker:
        await worker.stop()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "message": "Voting App API Running",
        "status": "OK",
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("pollfeed.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
