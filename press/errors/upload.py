"""
Upload-related error classes.

Cover ingestion itself never raises; these errors are raised by the
pipeline when a failed ingestion must abort the request.
"""

from starlette.status import HTTP_415_UNSUPPORTED_MEDIA_TYPE, HTTP_500_INTERNAL_SERVER_ERROR

from press.configs import settings
from press.errors.base import BaseAppError, create_exception_handler
from press.monitoring import get_logger

logger = get_logger(__name__)


class UploadError(BaseAppError):
    """Base exception for upload-related errors."""

    def __init__(
        self,
        detail: str = "We couldn't upload your file. Please try again.",
        status_code: int = HTTP_500_INTERNAL_SERVER_ERROR,
    ) -> None:
        super().__init__(detail=detail, status_code=status_code)


class CoverRejectedError(UploadError):
    """Exception raised when a cover image could not be ingested."""

    def __init__(self, allowed_types: list[str] | None = None) -> None:
        super().__init__(
            detail="Cover image not allowed or not uploaded. Please use a JPEG or PNG image.",
            status_code=HTTP_415_UNSUPPORTED_MEDIA_TYPE,
        )
        self.allowed_types = allowed_types or list(settings.COVER_ALLOWED_TYPES)


upload_exception_handler = create_exception_handler(logger)
