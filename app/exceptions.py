"""
Exceptions raised by the audio extraction server.

Every error carries the HTTP status it maps to, a human-readable message,
and optional details from the underlying failure.
"""

from typing import Optional


class AudioServiceError(Exception):
    """Base exception for all extraction server errors."""

    status_code = 500

    def __init__(self, message: str, details: Optional[str] = None):
        self.message = message
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class InvalidUrl(AudioServiceError):
    """URL is missing or does not point at a supported video."""

    status_code = 400

    def __init__(self, message: str = "Invalid YouTube URL", details: Optional[str] = None):
        super().__init__(message, details)


class MetadataFetchFailed(AudioServiceError):
    """The video platform did not return metadata."""

    status_code = 500


class DurationExceeded(AudioServiceError):
    """Source video is longer than the extraction ceiling."""

    status_code = 400

    def __init__(self, duration: int, limit: int):
        self.duration = duration
        self.limit = limit
        super().__init__(
            "Video is too long. Please use videos shorter than "
            f"{limit // 60} minutes for best transcription quality.",
            details=f"Video duration is {duration} seconds, limit is {limit} seconds",
        )


class TranscodeFailed(AudioServiceError):
    """ffmpeg or the upstream byte stream reported an error."""

    status_code = 500


class ExtractionProducedEmptyOutput(AudioServiceError):
    """The transcoder finished but left no audio on disk."""

    status_code = 500


class ArtifactNotFound(AudioServiceError):
    """No artifact with the requested name exists."""

    status_code = 404

    def __init__(self, filename: str):
        self.filename = filename
        super().__init__("Audio file not found", details=None)


class InvalidArtifactName(ArtifactNotFound):
    """Artifact name would escape the scratch directory."""
