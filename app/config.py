"""
Configuration settings for the audio extraction server.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel


# Ensure environment variables are loaded
load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent.absolute()


class Config(BaseModel):
    """Process-wide settings, built once at startup."""

    model_config = {"frozen": True}

    # Application info
    app_name: str = "Johnny Whisper"
    app_version: str = "0.2.0"
    service_name: str = "johnny-whisper"
    environment: str = "development"
    log_level: str = "DEBUG"

    # Server
    host: str = "0.0.0.0"
    port: int = 3001
    public_url: str = "http://localhost:3001"

    # Scratch directory for extracted audio
    temp_dir: Path = BASE_DIR / "temp"
    ffmpeg_binary: str = "ffmpeg"

    # Extraction limits
    max_duration_seconds: int = 1200
    metadata_timeout: float = 5.0
    stream_timeout: float = 30.0

    # Retention
    sweep_interval: float = 3600.0
    max_artifact_age: float = 3600.0
    delete_grace_delay: float = 5.0

    def initialize(self) -> None:
        """Create the directories the server writes to."""
        self.temp_dir.mkdir(parents=True, exist_ok=True)


def get_config() -> Config:
    """Get the appropriate configuration based on environment."""
    env = os.getenv("ENVIRONMENT", "development").lower()
    production = env == "production"

    return Config(
        environment=env,
        log_level=os.getenv("LOG_LEVEL", "INFO" if production else "DEBUG").upper(),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3001")),
        public_url=os.getenv("PUBLIC_URL", "http://localhost:3001"),
        temp_dir=Path(os.getenv("TEMP_DIR", str(BASE_DIR / "temp"))),
        ffmpeg_binary=os.getenv("FFMPEG_BINARY", "ffmpeg"),
        metadata_timeout=float(os.getenv("METADATA_TIMEOUT", "5")),
        stream_timeout=float(os.getenv("STREAM_TIMEOUT", "30")),
        sweep_interval=float(os.getenv("SWEEP_INTERVAL", "3600")),
        max_artifact_age=float(os.getenv("MAX_ARTIFACT_AGE", "3600")),
        delete_grace_delay=float(os.getenv("DELETE_GRACE_DELAY", "5")),
    )


# Create a config instance
config = get_config()
