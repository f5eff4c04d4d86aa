"""
Periodic cleanup of artifacts that were never downloaded.
"""

import asyncio
import contextlib
import time
from typing import List, Optional

from app.core.artifact_store import ArtifactStore
from app.exceptions import ArtifactNotFound
from app.utils.logger import logging


class RetentionSweeper:
    """Deletes artifacts older than ``max_age`` every ``interval`` seconds."""

    def __init__(self, store: ArtifactStore, interval: float = 3600.0, max_age: float = 3600.0):
        self.store = store
        self.interval = interval
        self.max_age = max_age
        self._task: Optional[asyncio.Task] = None

    def sweep_once(self, now: Optional[float] = None) -> List[str]:
        """
        Run a single cleanup pass.

        Per-file failures are logged and skipped.

        Returns:
            Names of the artifacts this pass removed
        """
        now = time.time() if now is None else now
        try:
            filenames = self.store.list_artifacts()
        except OSError as e:
            logging.error(f"Could not list scratch directory {self.store.root}: {e}")
            return []

        removed = []
        for filename in filenames:
            try:
                age = now - self.store.modified_time(filename)
                if age > self.max_age and self.store.delete(filename):
                    removed.append(filename)
                    logging.info(f"Cleaned up old file: {filename}")
            except ArtifactNotFound:
                # deleted by a download in the meantime
                continue
            except OSError as e:
                logging.error(f"Could not clean up {filename}: {e}")

        return removed

    async def run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.sweep_once()

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run(), name="retention-sweeper")
            logging.info(
                f"Retention sweeper started (every {self.interval:g}s, max age {self.max_age:g}s)"
            )
        return self._task

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
