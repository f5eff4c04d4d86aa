from typing import Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Response model serialized with camelCase keys."""

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class VideoRequest(BaseModel):
    """Model for info and extraction requests."""
    url: Optional[str] = None


class VideoInfoResponse(CamelModel):
    """Model for video info responses."""
    video_id: str
    title: str
    duration: int
    author: str
    thumbnail: Optional[str] = None


class ExtractAudioResponse(CamelModel):
    """Model for extraction responses."""
    success: bool = True
    audio_file: str
    size: int
    duration: int
    download_url: str


class HealthResponse(BaseModel):
    """Model for health check responses."""
    status: str
    timestamp: str
    service: Optional[str] = None


class ErrorResponse(BaseModel):
    """Model for error responses."""
    error: str
    details: Optional[str] = None
