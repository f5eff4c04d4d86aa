"""
Data models for the audio extraction server.
"""
from pathlib import Path
from typing import Optional

from pydantic import BaseModel


class VideoReference(BaseModel):
    """A validated video id and the URL it was resolved from."""
    video_id: str
    url: str

    model_config = {"frozen": True}

    @property
    def watch_url(self) -> str:
        return f"https://www.youtube.com/watch?v={self.video_id}"


class VideoMetadata(BaseModel):
    """Snapshot of a video's metadata, fetched once per request."""
    video_id: str
    title: str
    duration: int
    author: str
    thumbnail: Optional[str] = None


class AudioSource(BaseModel):
    """The audio-only stream chosen for a video."""
    url: str
    filesize: Optional[int] = None
    abr: Optional[str] = None
    mime_type: Optional[str] = None


class ExtractionJob(BaseModel):
    """One in-flight extraction; lives only for a single pipeline call."""
    reference: VideoReference
    filename: str
    path: Path
    duration: int


class ExtractionResult(BaseModel):
    """Handle to a finished artifact."""
    filename: str
    size: int
    duration: int
