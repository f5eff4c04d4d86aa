"""
Johnny Whisper audio extraction server.

Turns a YouTube URL into a mono 16 kHz WAV file ready for speech-to-text,
serves it once over HTTP, and cleans up after itself.
"""

from app.config import config

__version__ = config.app_version
