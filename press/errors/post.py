"""Errors raised by the publishing pipeline."""

from logging import getLogger

from press.configs import file_logger
from press.errors.base import create_exception_handler
from press.errors.database import DuplicateEntryError, RecordNotFoundError

logger = file_logger(getLogger(__name__))


class PostNotFoundError(RecordNotFoundError):
    """Exception raised when a slug does not resolve to a post."""

    def __init__(self, slug: str) -> None:
        super().__init__(detail=f"Post '{slug}' not found")
        self.slug = slug


class SlugConflictError(DuplicateEntryError):
    """
    Exception raised when a concurrent writer took the slug first.

    The client may resend the request; a fresh slug will be resolved.
    """

    def __init__(self, slug: str) -> None:
        super().__init__(detail=f"Slug '{slug}' was taken by a concurrent request")
        self.slug = slug
        self.retryable = True


post_exception_handler = create_exception_handler(logger)
