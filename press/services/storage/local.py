"""
Local filesystem storage implementation.

Staged uploads live in the temporary upload directory; ingested covers
are moved into the covers directory, which is served as static files.
"""

from contextlib import suppress
from logging import getLogger
from pathlib import Path
from uuid import uuid4

from aiofiles import os as aio_os

from press.configs import file_logger, settings

logger = file_logger(getLogger(__name__))

COVERS_URL_PATH = "/uploads/covers"


class LocalStorage:
    """
    Local filesystem storage implementation.

    Both directories are created on construction. Staging and cover
    directories should live on the same filesystem so relocation is a
    rename rather than a copy.
    """

    def __init__(
        self,
        covers_dir: Path | None = None,
        tmp_dir: Path | None = None,
        public_base_url: str | None = None,
    ) -> None:
        """Initialize local storage with configured paths."""
        self.covers_dir = covers_dir or settings.COVERS_DIR
        self.tmp_dir = tmp_dir or settings.UPLOADS_TMP_DIR
        self.public_base_url = (public_base_url or settings.PUBLIC_BASE_URL).rstrip("/")
        self._ensure_directories()

    def _ensure_directories(self) -> None:
        """Ensure the upload directories exist."""
        self.covers_dir.mkdir(parents=True, exist_ok=True)
        self.tmp_dir.mkdir(parents=True, exist_ok=True)

    def staging_path(self) -> Path:
        """Reserve a fresh path in the temporary upload directory."""
        return self.tmp_dir / f"{uuid4().hex}.upload"

    def cover_path(self, stored_name: str) -> Path:
        """
        Resolve a stored name inside the covers directory.

        Raises:
            ValueError: If the name would escape the covers directory
        """
        if stored_name in {"", ".", ".."} or Path(stored_name).name != stored_name:
            mssg = f"Invalid cover name: {stored_name!r}"
            raise ValueError(mssg)
        return self.covers_dir / stored_name

    async def relocate(self, temp_path: Path, target_name: str) -> bool:
        """
        Move a staged upload into the covers directory.

        Args:
            temp_path: Path of the staged file
            target_name: File name to store it under

        Returns:
            bool: True on success, False on any I/O failure
        """
        try:
            target = self.cover_path(target_name)
            await aio_os.rename(temp_path, target)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to relocate {temp_path} to {target_name}: {e}")
            return False
        return True

    async def discard(self, temp_path: Path) -> None:
        """Delete a staged upload; a missing file is not an error."""
        with suppress(FileNotFoundError):
            await aio_os.remove(temp_path)

    async def remove(self, stored_name: str) -> bool:
        """
        Delete a stored cover from the covers directory.

        Args:
            stored_name: File name in the cover store

        Returns:
            bool: True if deletion was successful, False otherwise
        """
        try:
            await aio_os.remove(self.cover_path(stored_name))
        except FileNotFoundError:
            return False
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to remove cover {stored_name}: {e}")
            return False
        return True

    def to_public_url(self, stored_name: str) -> str:
        """Build the public URL of a stored cover."""
        return f"{self.public_base_url}{COVERS_URL_PATH}/{stored_name}"
