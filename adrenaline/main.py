"""
Application factory

Run with: uvicorn adrenaline.main:create_app --factory
"""
from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from adrenaline.core.clock import NullScheduler, ThreadingScheduler
from adrenaline.core.config import settings
from adrenaline.core.logging import setup_logging
from adrenaline.gamification import AdrenalineComposer
from adrenaline.routers import adrenaline
from adrenaline.storage import create_store

logger = logging.getLogger(__name__)


def build_composer() -> AdrenalineComposer:
    """Composer wired from settings"""
    scheduler = ThreadingScheduler() if settings.FEVER_TIMER_ENABLED else NullScheduler()
    return AdrenalineComposer(
        store=create_store(settings.STORAGE_BACKEND),
        storage_key=settings.STORAGE_KEY,
        scheduler=scheduler,
    )


def create_app(composer: Optional[AdrenalineComposer] = None) -> FastAPI:
    composer = composer or build_composer()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Manage application lifecycle - startup and shutdown events"""
        setup_logging()
        logger.info(f"🚀 Starting {settings.APP_NAME}")
        logger.info(f"Environment: {settings.ENVIRONMENT}, storage: {settings.STORAGE_BACKEND}")

        yield

        app.state.composer.shutdown()
        logger.info(f"Shutting down {settings.APP_NAME}")

    app = FastAPI(
        title=settings.APP_NAME,
        description="Engagement-reward engine for vocabulary training",
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )
    app.state.composer = composer

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(adrenaline.router, prefix="/api/adrenaline", tags=["adrenaline"])

    @app.get("/")
    async def root():
        return JSONResponse(
            content={
                "message": settings.APP_NAME,
                "version": settings.APP_VERSION,
                "docs": "/docs",
            }
        )

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "environment": settings.ENVIRONMENT,
            "version": settings.APP_VERSION,
            "enabled": app.state.composer.enabled,
        }

    return app
