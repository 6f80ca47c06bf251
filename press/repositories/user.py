"""User repository for database operations."""

from sqlalchemy import select

from press.models.user import UserDB
from press.repositories.base import SessionRepository


class UserRepository(SessionRepository):
    """Repository for the authors that own posts."""

    async def get_by_id(self, user_id: int) -> UserDB | None:
        """
        Get user by ID.

        Args:
            user_id: User ID

        Returns:
            UserDB | None: User if found, None otherwise
        """
        async with self.store_errors("find user"):
            # pyrefly: ignore [bad-argument-type]
            return await self.session.get(UserDB, user_id)

    async def get_by_email(self, email: str) -> UserDB | None:
        """
        Get user by email address.

        Args:
            email: Email address

        Returns:
            UserDB | None: User if found, None otherwise
        """
        async with self.store_errors("find user by email"):
            result = await self.session.execute(
                # pyrefly: ignore [bad-argument-type]
                select(UserDB).where(UserDB.email == email),
            )
            return result.scalar_one_or_none()

    async def create(self, name: str, email: str) -> UserDB:
        """
        Create a new author.

        Raises:
            DuplicateEntryError: If the email is already registered
        """
        db_user = UserDB(name=name, email=email)
        async with self.store_errors("create user"):
            self.session.add(db_user)
            await self.session.flush()
            await self.session.refresh(db_user)
        return db_user
