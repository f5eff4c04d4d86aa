"""
Configuration for pytest tests.
"""

import os
import stat
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

# Must be set before the app package builds its module-level config
TEST_DATA_DIR = Path(__file__).resolve().parent.parent / "test_data"
os.environ["ENVIRONMENT"] = "development"
os.environ["TEMP_DIR"] = str(TEST_DATA_DIR / "temp")

from app.config import Config  # noqa: E402
from app.core.artifact_store import ArtifactStore  # noqa: E402
from app.models.schemas import VideoMetadata  # noqa: E402

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="fake ffmpeg is a shell script")

# Writes stdin to the last argument, like ffmpeg writing its output file
FAKE_FFMPEG_OK = """#!/bin/sh
for last; do :; done
cat > "$last"
"""

FAKE_FFMPEG_EMPTY = """#!/bin/sh
for last; do :; done
cat > /dev/null
: > "$last"
"""

FAKE_FFMPEG_FAIL = """#!/bin/sh
cat > /dev/null
echo "pipe:0: Invalid data found when processing input" >&2
exit 1
"""


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Create the shared test data directory and remove it afterwards."""
    TEST_DATA_DIR.mkdir(exist_ok=True)

    yield

    import shutil
    shutil.rmtree(TEST_DATA_DIR, ignore_errors=True)


@pytest.fixture
def test_video_url():
    """Return a test YouTube video URL."""
    return "https://www.youtube.com/watch?v=abc12345678"


@pytest.fixture
def fake_ffmpeg(tmp_path):
    """Return a factory writing an executable stand-in for ffmpeg."""
    def _make(script: str, name: str = "ffmpeg") -> str:
        path = tmp_path / "bin" / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(script)
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(path)

    return _make


@pytest.fixture
def test_config(tmp_path):
    """Return a config pointing at a private scratch directory."""
    return Config(
        temp_dir=tmp_path / "temp",
        delete_grace_delay=0.05,
        sweep_interval=3600,
        max_artifact_age=3600,
    )


@pytest.fixture
def store(test_config):
    """Return an artifact store on the test scratch directory."""
    return ArtifactStore(test_config.temp_dir)


@pytest.fixture
def make_metadata():
    """Return a factory for video metadata."""
    def _make(duration: int = 300, video_id: str = "abc12345678") -> VideoMetadata:
        return VideoMetadata(
            video_id=video_id,
            title="Test Video",
            duration=duration,
            author="Test Author",
            thumbnail="https://i.ytimg.com/vi/abc12345678/default.jpg",
        )

    return _make


@pytest.fixture
def mock_youtube():
    """Fixture to mock the pytubefix YouTube class."""
    with patch("app.core.source_resolver.YouTube") as mock_yt:
        mock_yt_instance = mock_yt.return_value
        mock_yt_instance.video_id = "abc12345678"
        mock_yt_instance.title = "Test Video"
        mock_yt_instance.author = "Test Author"
        mock_yt_instance.length = 300
        mock_yt_instance.thumbnail_url = "https://i.ytimg.com/vi/abc12345678/default.jpg"

        mock_audio_stream = MagicMock()
        mock_audio_stream.url = "https://rr1---sn-test.googlevideo.com/videoplayback?itag=140"
        mock_audio_stream.filesize = 10
        mock_audio_stream.abr = "128kbps"
        mock_audio_stream.mime_type = "audio/mp4"
        mock_yt_instance.streams.filter.return_value.order_by.return_value.last.return_value = mock_audio_stream

        yield mock_yt


async def collect(chunks):
    """Drain an async iterator into bytes."""
    data = b""
    async for chunk in chunks:
        data += chunk
    return data


async def iter_chunks(*chunks):
    for chunk in chunks:
        yield chunk
