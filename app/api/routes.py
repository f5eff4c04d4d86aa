"""
API routes for the audio extraction server.
"""

import traceback
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.api.schems import (
    ErrorResponse,
    ExtractAudioResponse,
    HealthResponse,
    VideoInfoResponse,
    VideoRequest,
)
from app.core import source_resolver
from app.core.delivery import ArtifactDelivery
from app.core.extraction import ExtractionPipeline
from app.core.source_resolver import SourceResolver
from app.exceptions import ArtifactNotFound, AudioServiceError, InvalidUrl
from app.utils.logger import logging

API_PREFIX = "/api/youtube"

router = APIRouter(prefix=API_PREFIX, tags=["youtube"])
health_router = APIRouter(tags=["health"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def get_resolver(request: Request) -> SourceResolver:
    return request.app.state.resolver


def get_pipeline(request: Request) -> ExtractionPipeline:
    return request.app.state.pipeline


def get_delivery(request: Request) -> ArtifactDelivery:
    return request.app.state.delivery


def error_response(status_code: int, error: str, details: str = None) -> JSONResponse:
    body = ErrorResponse(error=error, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def _require_url(payload: VideoRequest) -> str:
    if not payload.url:
        logging.info("URL is missing from the request body")
        raise InvalidUrl("URL is required")
    return payload.url


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@router.post("/info", response_model=VideoInfoResponse, responses=ERROR_RESPONSES)
async def get_video_info(
    payload: VideoRequest,
    resolver: SourceResolver = Depends(get_resolver),
):
    """Get title, duration, author and thumbnail of a YouTube video."""
    logging.info(f"Received request for {API_PREFIX}/info: {payload.url}")
    try:
        ref = source_resolver.resolve_id(_require_url(payload))
        metadata = await resolver.fetch_metadata(ref)
    except InvalidUrl as e:
        logging.info(f"Rejected info request: {e.message}")
        return error_response(e.status_code, e.message)
    except AudioServiceError as e:
        return error_response(500, "Failed to get video information", e.details or e.message)

    return VideoInfoResponse(
        video_id=metadata.video_id,
        title=metadata.title,
        duration=metadata.duration,
        author=metadata.author,
        thumbnail=metadata.thumbnail,
    )


@router.post("/extract-audio", response_model=ExtractAudioResponse, responses=ERROR_RESPONSES)
async def extract_audio(
    payload: VideoRequest,
    pipeline: ExtractionPipeline = Depends(get_pipeline),
):
    """
    Extract a mono 16 kHz WAV track from a YouTube video.

    - Videos longer than 20 minutes are rejected before any download starts
    - The artifact is kept until it is downloaded or it expires
    """
    try:
        result = await pipeline.extract(_require_url(payload))
    except AudioServiceError as e:
        if e.status_code == 400:
            return error_response(400, e.message)
        logging.error(f"Error extracting audio: {e.message} ({e.details})")
        logging.error(traceback.format_exc())
        return error_response(
            500, "Failed to extract audio from YouTube video", e.details or e.message
        )

    return ExtractAudioResponse(
        audio_file=result.filename,
        size=result.size,
        duration=result.duration,
        download_url=f"{API_PREFIX}/download/{result.filename}",
    )


@router.get("/download/{filename}", responses=ERROR_RESPONSES)
async def download_audio(
    filename: str,
    delivery: ArtifactDelivery = Depends(get_delivery),
):
    """Stream an extracted audio file; it is deleted shortly after the download."""
    try:
        return delivery.serve(filename)
    except ArtifactNotFound as e:
        return error_response(404, e.message)
    except OSError as e:
        logging.error(f"Error downloading file {filename}: {e}")
        return error_response(500, "Failed to download audio file")


@health_router.get("/health", response_model=HealthResponse)
async def health(request: Request):
    """Health check used by container orchestration."""
    return HealthResponse(
        status="healthy",
        timestamp=_timestamp(),
        service=request.app.state.config.service_name,
    )


@health_router.get("/api/health", response_model=HealthResponse, response_model_exclude_none=True)
async def api_health():
    """Health check polled by clients before each operation."""
    return HealthResponse(status="OK", timestamp=_timestamp())
