"""
Streaming read-back of artifacts with delayed cleanup.
"""

import asyncio
import contextlib
from typing import AsyncIterator, BinaryIO, Set

from starlette.responses import StreamingResponse

from app.core.artifact_store import ArtifactStore
from app.utils.logger import logging

AUDIO_MEDIA_TYPE = "audio/wav"
READ_CHUNK_SIZE = 64 * 1024


class ArtifactDelivery:
    """Serves artifacts once and removes them after a grace delay."""

    def __init__(self, store: ArtifactStore, grace_delay: float = 5.0):
        self.store = store
        self.grace_delay = grace_delay
        self._pending: Set[asyncio.Task] = set()

    def serve(self, filename: str) -> StreamingResponse:
        """
        Build the download response for an artifact.

        Deletion is scheduled only once the whole file has been handed to
        the server; an interrupted download keeps the artifact until the
        retention sweeper removes it.

        Raises:
            ArtifactNotFound: if the artifact does not exist
        """
        size = self.store.size(filename)
        handle = self.store.open_read(filename)

        return StreamingResponse(
            self._iter_file(filename, handle),
            media_type=AUDIO_MEDIA_TYPE,
            headers={
                "Content-Disposition": f'attachment; filename="{filename}"',
                "Content-Length": str(size),
            },
        )

    async def _iter_file(self, filename: str, handle: BinaryIO) -> AsyncIterator[bytes]:
        try:
            while True:
                chunk = await asyncio.to_thread(handle.read, READ_CHUNK_SIZE)
                if not chunk:
                    break
                yield chunk
        finally:
            handle.close()

        # only reached after the last chunk was sent
        self.schedule_deletion(filename)

    def schedule_deletion(self, filename: str) -> asyncio.Task:
        """Delete ``filename`` after the grace delay without blocking the caller."""
        task = asyncio.create_task(self._delete_later(filename))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _delete_later(self, filename: str) -> None:
        # slow consumers and proxies may still be reading
        await asyncio.sleep(self.grace_delay)
        try:
            if self.store.delete(filename):
                logging.info(f"Cleaned up file: {filename}")
        except OSError as e:
            logging.error(f"Could not clean up {filename}: {e}")

    async def shutdown(self) -> None:
        """Cancel deletions still waiting out their grace delay."""
        for task in list(self._pending):
            task.cancel()
        for task in list(self._pending):
            with contextlib.suppress(asyncio.CancelledError):
                await task
