from press.errors.base import BaseAppError, create_exception_handler, create_fallback_handler
from press.errors.database import (
    DatabaseError,
    DuplicateEntryError,
    InvalidValueError,
    RecordNotFoundError,
    StoreUnavailableError,
    database_exception_handler,
)
from press.errors.post import PostNotFoundError, SlugConflictError, post_exception_handler
from press.errors.upload import CoverRejectedError, UploadError, upload_exception_handler
from press.errors.validation import (
    ValidationError,
    app_validation_exception_handler,
    validation_exception_handler,
)

__all__ = [
    "BaseAppError",
    "create_exception_handler",
    "create_fallback_handler",
    "DatabaseError",
    "DuplicateEntryError",
    "InvalidValueError",
    "RecordNotFoundError",
    "StoreUnavailableError",
    "database_exception_handler",
    "PostNotFoundError",
    "SlugConflictError",
    "post_exception_handler",
    "CoverRejectedError",
    "UploadError",
    "upload_exception_handler",
    "ValidationError",
    "app_validation_exception_handler",
    "validation_exception_handler",
]
