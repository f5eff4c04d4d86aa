"""
Scratch directory holding extracted audio artifacts.

Files on disk are the only state: there is no index. Deletes are
idempotent so the delivery cleanup and the retention sweeper can race
without locking.
"""

import os
from pathlib import Path
from typing import BinaryIO, List, Union

from app.exceptions import ArtifactNotFound, InvalidArtifactName
from app.utils.logger import logging


class ArtifactStore:
    """File operations on the scratch directory, addressed by filename."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def path(self, filename: str) -> Path:
        """
        Join a filename onto the scratch directory.

        Raises:
            InvalidArtifactName: if the name could resolve outside the directory
        """
        if (
            not filename
            or filename in (".", "..")
            or "/" in filename
            or "\\" in filename
            or "\x00" in filename
        ):
            raise InvalidArtifactName(filename)
        return self.root / filename

    def exists(self, filename: str) -> bool:
        try:
            return self.path(filename).is_file()
        except InvalidArtifactName:
            return False

    def size(self, filename: str) -> int:
        return self._stat(filename).st_size

    def modified_time(self, filename: str) -> float:
        return self._stat(filename).st_mtime

    def _stat(self, filename: str) -> os.stat_result:
        try:
            return self.path(filename).stat()
        except FileNotFoundError as e:
            raise ArtifactNotFound(filename) from e

    def open_read(self, filename: str) -> BinaryIO:
        """Open an artifact for streaming read-back."""
        try:
            return open(self.path(filename), "rb")
        except FileNotFoundError as e:
            raise ArtifactNotFound(filename) from e

    def list_artifacts(self) -> List[str]:
        """Names of all regular files in the scratch directory."""
        with os.scandir(self.root) as entries:
            return [entry.name for entry in entries if entry.is_file()]

    def delete(self, filename: str) -> bool:
        """
        Remove an artifact if it is still there.

        Returns:
            True if this call removed the file, False if it was already gone
        """
        try:
            os.remove(self.path(filename))
        except FileNotFoundError:
            return False
        logging.debug(f"Deleted artifact: {filename}")
        return True
