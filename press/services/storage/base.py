"""
Base storage protocol for cover file storage.

This module defines the interface the publishing pipeline needs from a
storage backend, allowing for different implementations.
"""

from abc import abstractmethod
from pathlib import Path
from typing import Protocol


class FileStorage(Protocol):
    """
    Protocol defining the interface for cover storage services.

    All storage implementations must implement these methods
    to ensure consistent behavior across different backends.
    """

    @abstractmethod
    def staging_path(self) -> Path:
        """
        Reserve a fresh path in the temporary upload area.

        Returns:
            Path: Path that does not exist yet
        """
        ...

    @abstractmethod
    async def relocate(self, temp_path: Path, target_name: str) -> bool:
        """
        Move a staged upload into the permanent cover store.

        Args:
            temp_path: Path of the staged file
            target_name: File name to store it under

        Returns:
            bool: True if the file now exists under `target_name`
        """
        ...

    @abstractmethod
    async def discard(self, temp_path: Path) -> None:
        """
        Delete a staged upload that will not be ingested.

        Args:
            temp_path: Path of the staged file
        """
        ...

    @abstractmethod
    async def remove(self, stored_name: str) -> bool:
        """
        Delete a stored cover.

        Args:
            stored_name: File name in the cover store

        Returns:
            bool: True if a file was deleted
        """
        ...

    @abstractmethod
    def to_public_url(self, stored_name: str) -> str:
        """
        Build the public URL of a stored cover.

        Args:
            stored_name: File name in the cover store

        Returns:
            str: Absolute URL
        """
        ...
