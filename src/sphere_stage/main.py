# src/sphere_stage/main.py
"""Main entry point for the Sphere application."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from sphere_stage.api.v1 import (
    comments_router,
    moderation_router,
    posts_router,
    spheres_router,
    votes_router,
)
from sphere_stage.core.settings import settings
from sphere_stage.services.ranking_sweep import RankingSweepWorker

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Community forum API with vote-ranked posts and comment trees",
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
app.include_router(votes_router, prefix="/api/v1")
app.include_router(spheres_router, prefix="/api/v1")
app.include_router(moderation_router, prefix="/api/v1")


@app.on_event("startup")
async def on_startup() -> None:
    worker = RankingSweepWorker()
    await worker.start()
    app.state.ranking_worker = worker if worker.running else None


@app.on_event("shutdown")
async def on_shutdown() -> None:
    worker: RankingSweepWorker | None = getattr(app.state, "ranking_worker", None)
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
        "description": "Community forum API with vote-ranked posts and comment trees",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("sphere_stage.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
