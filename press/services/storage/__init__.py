"""
Storage services package.

This package provides the storage backend for cover uploads.
"""

from press.services.storage.base import FileStorage
from press.services.storage.local import COVERS_URL_PATH, LocalStorage


def get_storage_service() -> FileStorage:
    """
    Get the configured storage service.

    Returns:
        FileStorage: Configured storage service instance
    """
    return LocalStorage()


__all__ = [
    "COVERS_URL_PATH",
    "FileStorage",
    "LocalStorage",
    "get_storage_service",
]
