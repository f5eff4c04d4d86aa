"""
YouTube URL resolution, metadata lookup and audio stream access.
"""

import asyncio
import re
from typing import AsyncIterator, Optional
from urllib.parse import parse_qs, urlparse

import httpx
from pytubefix import YouTube

from app.exceptions import InvalidUrl, MetadataFetchFailed, TranscodeFailed
from app.models.schemas import AudioSource, VideoMetadata, VideoReference
from app.utils.logger import logging

# Stable browser-like headers to improve reliability with YouTube
REQUEST_HEADERS = {
    "user-agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
    ),
    "accept-language": "en-US,en;q=0.9",
}

# YouTube throttles unranged media requests, fetch in ranges instead
RANGE_SIZE = 9 * 1024 * 1024
CHUNK_SIZE = 64 * 1024

VALID_HOSTS = {
    "youtube.com",
    "www.youtube.com",
    "m.youtube.com",
    "music.youtube.com",
    "gaming.youtube.com",
    "youtube-nocookie.com",
    "www.youtube-nocookie.com",
}
SHORT_HOSTS = {"youtu.be"}
PATH_PREFIXES = ("embed", "v", "shorts", "live")
VIDEO_ID_RE = re.compile(r"^[A-Za-z0-9_-]{11}$")


def _extract_video_id(url: str) -> Optional[str]:
    if not isinstance(url, str):
        return None
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return None
    if parsed.scheme not in ("http", "https"):
        return None

    host = (parsed.hostname or "").lower()
    segments = [s for s in parsed.path.split("/") if s]
    candidate = None

    if host in SHORT_HOSTS:
        candidate = segments[0] if segments else None
    elif host in VALID_HOSTS:
        candidate = parse_qs(parsed.query).get("v", [None])[0]
        if candidate is None and len(segments) >= 2 and segments[0] in PATH_PREFIXES:
            candidate = segments[1]
    else:
        return None

    if candidate and VIDEO_ID_RE.match(candidate):
        return candidate
    return None


def validate(url: str) -> bool:
    """Return whether the URL points at a supported YouTube video."""
    return _extract_video_id(url) is not None


def resolve_id(url: str) -> VideoReference:
    """
    Resolve a URL to its video reference.

    Raises:
        InvalidUrl: if the URL does not match a supported pattern
    """
    video_id = _extract_video_id(url)
    if video_id is None:
        raise InvalidUrl()
    return VideoReference(video_id=video_id, url=url.strip())


class SourceResolver:
    """Fetches metadata and audio bytes for YouTube videos."""

    def __init__(self, metadata_timeout: float = 5.0, stream_timeout: float = 30.0):
        """
        Initialize the resolver.

        Args:
            metadata_timeout: Seconds to wait for metadata and stream lookups
            stream_timeout: Seconds to wait on any single media read
        """
        self.metadata_timeout = metadata_timeout
        self.stream_timeout = stream_timeout

    def _youtube(self, ref: VideoReference) -> YouTube:
        # pytubefix sends its own client profile and takes no request headers
        return YouTube(ref.watch_url)

    def _load_metadata(self, ref: VideoReference) -> VideoMetadata:
        yt = self._youtube(ref)
        return VideoMetadata(
            video_id=yt.video_id,
            title=yt.title,
            duration=int(yt.length or 0),
            author=yt.author,
            thumbnail=yt.thumbnail_url,
        )

    def _load_audio_source(self, ref: VideoReference) -> AudioSource:
        yt = self._youtube(ref)
        stream = yt.streams.filter(only_audio=True).order_by("abr").last()
        if stream is None:
            raise ValueError(f"No audio-only stream available for {ref.video_id}")
        return AudioSource(
            url=stream.url,
            filesize=stream.filesize or None,
            abr=stream.abr,
            mime_type=stream.mime_type,
        )

    async def _bounded(self, func, ref: VideoReference):
        return await asyncio.wait_for(
            asyncio.to_thread(func, ref), timeout=self.metadata_timeout
        )

    async def fetch_metadata(self, ref: VideoReference) -> VideoMetadata:
        """
        Fetch title, duration, author and thumbnail for a video.

        Raises:
            MetadataFetchFailed: on network, upstream or timeout errors
        """
        logging.info(f"Fetching video info for: {ref.watch_url}")
        try:
            metadata = await self._bounded(self._load_metadata, ref)
        except asyncio.TimeoutError as e:
            raise MetadataFetchFailed(
                "Failed to get video information",
                details=f"Timed out after {self.metadata_timeout:g} seconds",
            ) from e
        except Exception as e:
            logging.error(f"Error getting video info for {ref.video_id}: {e}")
            raise MetadataFetchFailed("Failed to get video information", details=str(e)) from e

        logging.info(f"Successfully fetched video info for: {metadata.title}")
        return metadata

    async def resolve_audio_source(self, ref: VideoReference) -> AudioSource:
        """
        Pick the highest bitrate audio-only stream for a video.

        Raises:
            TranscodeFailed: if no stream URL can be obtained
        """
        try:
            source = await self._bounded(self._load_audio_source, ref)
        except asyncio.TimeoutError as e:
            raise TranscodeFailed(
                "Failed to resolve audio stream",
                details=f"Timed out after {self.metadata_timeout:g} seconds",
            ) from e
        except Exception as e:
            raise TranscodeFailed("Failed to resolve audio stream", details=str(e)) from e

        logging.debug(f"Selected audio stream {source.mime_type} {source.abr} ({source.filesize} bytes)")
        return source

    async def open_audio_stream(self, ref: VideoReference) -> AsyncIterator[bytes]:
        """
        Open the audio-only byte stream of a video.

        The stream lookup happens here; the returned iterator then reads
        the media in ranged requests sent with REQUEST_HEADERS. HTTP
        errors propagate to the consumer.
        """
        source = await self.resolve_audio_source(ref)
        return self.iter_source(source)

    async def iter_source(self, source: AudioSource) -> AsyncIterator[bytes]:
        """Yield the bytes of an audio source chunk by chunk."""
        async with httpx.AsyncClient(
            headers=REQUEST_HEADERS,
            timeout=self.stream_timeout,
            follow_redirects=True,
        ) as client:
            downloaded = 0
            while source.filesize is None or downloaded < source.filesize:
                end = downloaded + RANGE_SIZE - 1
                received = 0
                async with client.stream(
                    "GET", source.url, params={"range": f"{downloaded}-{end}"}
                ) as response:
                    response.raise_for_status()
                    async for chunk in response.aiter_bytes(CHUNK_SIZE):
                        received += len(chunk)
                        yield chunk

                downloaded += received
                # a server ignoring the range parameter returned the whole body
                if received == 0 or received > RANGE_SIZE:
                    break
                if source.filesize is None and received < RANGE_SIZE:
                    break

        logging.debug(f"Audio stream finished after {downloaded} bytes")
