"""
ffmpeg transcoding of a piped byte stream into speech-ready WAV audio.

Output is always mono, 16 kHz, 16-bit PCM WAV: the format speech
recognition models consume. The format is not configurable.
"""

import asyncio
import contextlib
from pathlib import Path
from typing import AsyncIterator, List, Optional

from app.exceptions import TranscodeFailed
from app.utils.logger import logging

AUDIO_CHANNELS = 1
AUDIO_FREQUENCY = 16000
AUDIO_BITRATE = "128k"
OUTPUT_FORMAT = "wav"

STDERR_TAIL = 2000


class AudioTranscoder:
    """Runs ffmpeg as a child process fed through stdin."""

    def __init__(self, ffmpeg_binary: str = "ffmpeg"):
        self.ffmpeg_binary = ffmpeg_binary

    def build_command(self, target: Path) -> List[str]:
        """Argument vector writing the fixed output format to ``target``."""
        return [
            self.ffmpeg_binary,
            "-hide_banner",
            "-nostats",
            "-y",
            "-i",
            "pipe:0",
            "-vn",
            "-acodec",
            "pcm_s16le",
            "-ac",
            str(AUDIO_CHANNELS),
            "-ar",
            str(AUDIO_FREQUENCY),
            "-b:a",
            AUDIO_BITRATE,
            "-f",
            OUTPUT_FORMAT,
            "-progress",
            "pipe:1",
            str(target),
        ]

    async def check_available(self, timeout: float = 5.0) -> bool:
        """Return whether the ffmpeg binary can be executed."""
        try:
            proc = await asyncio.create_subprocess_exec(
                self.ffmpeg_binary,
                "-version",
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError:
            return False

        try:
            return await asyncio.wait_for(proc.wait(), timeout=timeout) == 0
        except asyncio.TimeoutError:
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
            return False

    async def transcode(
        self,
        chunks: AsyncIterator[bytes],
        target: Path,
        duration: Optional[int] = None,
    ) -> None:
        """
        Pipe ``chunks`` through ffmpeg into ``target``.

        Resolves when ffmpeg exits cleanly. Any ffmpeg error, or an error
        raised by the source iterator, surfaces as TranscodeFailed.

        Args:
            chunks: Source media bytes
            target: Output file path
            duration: Source duration in seconds, used for progress logging
        """
        cmd = self.build_command(target)
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logging.error(f"FFmpeg could not be started: {e}")
            raise TranscodeFailed("FFmpeg is not available", details=str(e)) from e

        logging.info(f"FFmpeg started with command: {' '.join(cmd)}")

        progress_task = asyncio.create_task(self._watch_progress(proc.stdout, duration))
        stderr_task = asyncio.create_task(proc.stderr.read())

        upstream_error = None
        try:
            try:
                await self._feed(proc.stdin, chunks)
            except Exception as e:
                upstream_error = e
                logging.error(f"Source stream failed, stopping FFmpeg: {e}")
                with contextlib.suppress(ProcessLookupError):
                    proc.kill()

            returncode = await proc.wait()
            stderr = await stderr_task
            await progress_task
        finally:
            # still running only when cancelled
            if proc.returncode is None:
                logging.warning("Transcoding cancelled, stopping FFmpeg")
                with contextlib.suppress(ProcessLookupError):
                    proc.kill()
                await proc.wait()
            progress_task.cancel()
            stderr_task.cancel()
            await asyncio.gather(progress_task, stderr_task, return_exceptions=True)

        if upstream_error is not None:
            raise TranscodeFailed(
                "Source stream failed during transcoding", details=str(upstream_error)
            ) from upstream_error

        if returncode != 0:
            message = stderr.decode(errors="replace").strip()[-STDERR_TAIL:]
            logging.error(f"FFmpeg error (exit code {returncode}): {message}")
            raise TranscodeFailed(
                f"FFmpeg exited with code {returncode}", details=message or None
            )

        logging.info("Audio extraction completed")

    async def _feed(self, stdin: asyncio.StreamWriter, chunks: AsyncIterator[bytes]) -> None:
        try:
            async for chunk in chunks:
                stdin.write(chunk)
                await stdin.drain()
        except (BrokenPipeError, ConnectionResetError):
            # ffmpeg stopped reading; its exit status tells us why
            logging.warning("FFmpeg closed its input before the source stream ended")
        finally:
            aclose = getattr(chunks, "aclose", None)
            if aclose is not None:
                await aclose()
            if not stdin.is_closing():
                stdin.close()
            with contextlib.suppress(BrokenPipeError, ConnectionResetError):
                await stdin.wait_closed()

    async def _watch_progress(self, stdout: asyncio.StreamReader, duration: Optional[int]) -> None:
        async for raw in stdout:
            key, _, value = raw.decode(errors="replace").strip().partition("=")
            if key != "out_time_us" or not duration:
                continue
            try:
                percent = int(value) / (duration * 1_000_000) * 100
            except ValueError:
                continue
            logging.info(f"Processing: {min(percent, 100.0):.1f}% done")
