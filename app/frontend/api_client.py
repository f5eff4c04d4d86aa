"""
API client for communicating with the audio extraction server.
"""

from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union
from urllib.parse import urljoin

import requests

from app.config import config

HEALTH_TIMEOUT = 5


class ApiClientError(Exception):
    """Raised when the server is unreachable or reports an error."""


def format_duration(seconds: Optional[int]) -> str:
    """Render a duration in seconds as ``m:ss``."""
    if not seconds:
        return "Unknown"
    return f"{seconds // 60}:{seconds % 60:02d}"


class ApiClient:
    """Client for interacting with the audio extraction API."""

    def __init__(self, base_url: str = config.public_url, session: Optional[requests.Session] = None):
        """
        Initialize the API client.

        Args:
            base_url: Base URL of the API
            session: Optional requests session to reuse connections
        """
        self.base_url = base_url
        self.api_base = urljoin(base_url, "/api/youtube/")
        self.session = session or requests.Session()

    def _url(self, endpoint: str) -> str:
        """Get the full URL for an endpoint."""
        return urljoin(self.api_base, endpoint)

    def is_backend_available(self) -> bool:
        """Check if the backend service answers its health check."""
        try:
            response = self.session.get(urljoin(self.base_url, "/api/health"), timeout=HEALTH_TIMEOUT)
            return response.ok
        except requests.RequestException:
            return False

    def _ensure_backend(self) -> None:
        if not self.is_backend_available():
            raise ApiClientError(
                "Backend service is not available. Please start the YouTube extraction server."
            )

    @staticmethod
    def _raise_for_error(response: requests.Response) -> None:
        if response.ok:
            return
        try:
            error = response.json().get("error")
        except ValueError:
            error = None
        raise ApiClientError(error or f"HTTP {response.status_code}")

    def get_video_info(self, url: str) -> Dict[str, Any]:
        """
        Get metadata for a video.

        Args:
            url: YouTube video URL

        Returns:
            Dictionary with videoId, title, duration, author and thumbnail
        """
        self._ensure_backend()
        response = self.session.post(self._url("info"), json={"url": url})
        self._raise_for_error(response)
        return response.json()

    def extract_audio(self, url: str) -> Dict[str, Any]:
        """
        Request audio extraction for a video.

        Returns:
            Dictionary with audioFile, size, duration and downloadUrl
        """
        self._ensure_backend()
        response = self.session.post(self._url("extract-audio"), json={"url": url})
        self._raise_for_error(response)

        result = response.json()
        if not result.get("success") or not result.get("downloadUrl"):
            raise ApiClientError("Audio extraction failed")
        return result

    def download_audio(
        self,
        url: str,
        destination: Union[str, Path],
        on_progress: Optional[Callable[[float], None]] = None,
    ) -> Path:
        """
        Extract a video's audio and save the WAV file locally.

        Args:
            url: YouTube video URL
            destination: Directory to write the file into
            on_progress: Called with the fraction of bytes received so far

        Returns:
            Path of the saved file
        """
        result = self.extract_audio(url)
        target = Path(destination) / result["audioFile"]
        target.parent.mkdir(parents=True, exist_ok=True)

        with self.session.get(
            urljoin(self.base_url, result["downloadUrl"]),
            headers={"Accept": "audio/wav,audio/*,*/*;q=0.9"},
            stream=True,
        ) as response:
            self._raise_for_error(response)
            total = int(response.headers.get("content-length") or 0)
            loaded = 0
            with open(target, "wb") as f:
                for chunk in response.iter_content(chunk_size=64 * 1024):
                    f.write(chunk)
                    loaded += len(chunk)
                    if on_progress and total:
                        on_progress(loaded / total)

        return target
