"""
FastAPI application for the audio extraction server.
"""

import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import Config, config as default_config
from app.api.routes import health_router, router
from app.core.artifact_store import ArtifactStore
from app.core.delivery import ArtifactDelivery
from app.core.extraction import ExtractionPipeline
from app.core.retention import RetentionSweeper
from app.core.source_resolver import SourceResolver
from app.core.transcoder import AudioTranscoder
from app.utils.logger import logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start background work on startup and stop it on shutdown."""
    settings: Config = app.state.config
    settings.initialize()

    if await app.state.transcoder.check_available():
        logging.info("FFmpeg is available and ready")
    else:
        logging.error(
            f"FFmpeg not found ({settings.ffmpeg_binary})! "
            "Please install FFmpeg to use this service."
        )

    app.state.sweeper.start()
    logging.info(f"{settings.app_name} v{settings.app_version} ready, scratch dir: {settings.temp_dir}")

    yield

    await app.state.sweeper.stop()
    await app.state.delivery.shutdown()


def create_app(settings: Optional[Config] = None) -> FastAPI:
    """Build the application and wire its components from ``settings``."""
    settings = settings or default_config

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="An API for extracting speech-ready audio from YouTube videos",
        lifespan=lifespan,
    )

    store = ArtifactStore(settings.temp_dir)
    resolver = SourceResolver(
        metadata_timeout=settings.metadata_timeout,
        stream_timeout=settings.stream_timeout,
    )
    transcoder = AudioTranscoder(settings.ffmpeg_binary)

    app.state.config = settings
    app.state.store = store
    app.state.resolver = resolver
    app.state.transcoder = transcoder
    app.state.pipeline = ExtractionPipeline(settings, resolver, store, transcoder)
    app.state.delivery = ArtifactDelivery(store, grace_delay=settings.delete_grace_delay)
    app.state.sweeper = RetentionSweeper(
        store,
        interval=settings.sweep_interval,
        max_age=settings.max_artifact_age,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        """Middleware to add processing time header to responses."""
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Malformed request bodies are client errors, reported like the others."""
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request body", "details": str(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler for unhandled exceptions."""
        logging.exception(f"Unhandled error on {request.url.path}")
        return JSONResponse(
            status_code=500,
            content={"error": "An unexpected error occurred", "details": str(exc)},
        )

    app.include_router(router)
    app.include_router(health_router)

    return app


app = create_app()
