"""Shared error translation for repositories."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from logging import getLogger

from sqlalchemy.exc import DataError, IntegrityError, InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession

from press.configs import file_logger
from press.errors.database import (
    DatabaseError,
    DuplicateEntryError,
    InvalidValueError,
    StoreUnavailableError,
)

logger = file_logger(getLogger(__name__))


class SessionRepository:
    """
    Base for repositories bound to a request-scoped session.

    Subclasses run their statements inside `store_errors()` so callers only
    ever see the application's database error hierarchy.
    """

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize repository with database session.

        Args:
            session: Async database session
        """
        self.session = session

    @asynccontextmanager
    async def store_errors(self, action: str) -> AsyncGenerator[None]:
        """
        Translate SQLAlchemy and driver failures raised inside the block.

        Args:
            action: Short description used in log lines and error details

        Raises:
            DuplicateEntryError: If a unique constraint is violated
            StoreUnavailableError: If the database cannot be reached
            InvalidValueError: If a value is too long or malformed for its column
            DatabaseError: For other integrity errors
        """
        try:
            yield
        except IntegrityError as e:
            await self.session.rollback()
            error_msg = str(e.orig) if e.orig else str(e)
            if "unique" in error_msg.lower() or "duplicate" in error_msg.lower():
                raise DuplicateEntryError(detail=error_msg) from e
            raise DatabaseError(detail=f"Database integrity error: {error_msg}") from e
        except DataError as e:
            await self.session.rollback()
            logger.warning(f"Rejected value while trying to {action}: {e.orig or e}")
            raise InvalidValueError from e
        except (OperationalError, InterfaceError, PoolTimeoutError, OSError) as e:
            logger.error(f"Store unavailable while trying to {action}: {e}")
            raise StoreUnavailableError from e
