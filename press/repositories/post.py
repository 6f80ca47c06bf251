"""Post repository for database operations."""

from collections.abc import Sequence
from dataclasses import dataclass
from logging import getLogger
from typing import Any

from sqlalchemy import Select, desc, or_, select

from press.configs import file_logger
from press.errors.post import PostNotFoundError
from press.models.post import PostDB, PostStatus, utc_now
from press.repositories.base import SessionRepository
from press.schemas.post import PostCreate

logger = file_logger(getLogger(__name__))

UPDATABLE_FIELDS = frozenset({"title", "tags", "body", "status", "cover", "updated_at"})


@dataclass(frozen=True)
class PostFilter:
    """
    Filter for `PostRepository.find_many`.

    Attributes:
        status: Only posts in this status
        tags_contain_any: Posts whose tags contain any of these terms
            (case-insensitive substring match)
        exclude_slug: Leave out the post with this slug
    """

    status: PostStatus | None = None
    tags_contain_any: Sequence[str] = ()
    exclude_slug: str | None = None


class PostRepository(SessionRepository):
    """
    Repository for Post database operations.

    Every method is a single statement followed by a flush; the surrounding
    request transaction commits it.
    """

    async def find_by_slug(self, slug: str) -> PostDB | None:
        """
        Get post by slug.

        Args:
            slug: Post slug

        Returns:
            PostDB | None: Post if found, None otherwise
        """
        async with self.store_errors("find post by slug"):
            result = await self.session.execute(
                # pyrefly: ignore [bad-argument-type]
                select(PostDB).where(PostDB.slug == slug),
            )
            return result.scalar_one_or_none()

    async def slug_exists(self, slug: str) -> bool:
        """
        Check whether a slug is taken without loading the post.

        Args:
            slug: Candidate slug

        Returns:
            bool: True if a post already uses the slug
        """
        async with self.store_errors("check slug"):
            result = await self.session.execute(
                # pyrefly: ignore [bad-argument-type]
                select(1).where(PostDB.slug == slug).limit(1),
            )
            return result.scalar_one_or_none() is not None

    @staticmethod
    def build_query(post_filter: PostFilter) -> Select[tuple[PostDB]]:
        """
        Build the filtered, newest-first select for `find_many`.

        Args:
            post_filter: Filter to apply

        Returns:
            Select: Statement without pagination
        """
        query = select(PostDB)

        if post_filter.status is not None:
            # pyrefly: ignore [bad-argument-type]
            query = query.where(PostDB.status == post_filter.status.value)
        if post_filter.exclude_slug is not None:
            # pyrefly: ignore [bad-argument-type]
            query = query.where(PostDB.slug != post_filter.exclude_slug)
        if post_filter.tags_contain_any:
            tag_conditions = [
                # pyrefly: ignore [missing-attribute]
                PostDB.tags.icontains(term, autoescape=True)
                for term in post_filter.tags_contain_any
            ]
            query = query.where(or_(*tag_conditions))

        # pyrefly: ignore [bad-argument-type]
        return query.order_by(desc(PostDB.created_at))

    async def find_many(
        self,
        post_filter: PostFilter,
        *,
        limit: int,
        offset: int = 0,
    ) -> list[PostDB]:
        """
        Get posts matching a filter, newest first.

        Args:
            post_filter: Filter to apply
            limit: Maximum number of records to return
            offset: Number of records to skip

        Returns:
            list[PostDB]: Matching posts
        """
        query = self.build_query(post_filter).offset(offset).limit(limit)
        async with self.store_errors("list posts"):
            result = await self.session.execute(query)
            return list(result.scalars().all())

    async def create(
        self,
        post: PostCreate,
        *,
        author_id: int,
        slug: str,
        cover: str,
    ) -> PostDB:
        """
        Create a new post in the database.

        Args:
            post: Validated post fields
            author_id: ID of the author
            slug: Unique slug resolved for the title
            cover: Stored cover file name

        Returns:
            PostDB: Created post

        Raises:
            DuplicateEntryError: If the slug was taken in the meantime
            StoreUnavailableError: If the database cannot be reached
        """
        now = utc_now()
        db_post = PostDB(
            author_id=author_id,
            slug=slug,
            title=post.title,
            tags=post.tags,
            body=post.body,
            cover=cover,
            status=PostStatus.DRAFT,
            created_at=now,
            updated_at=now,
        )

        async with self.store_errors("create post"):
            self.session.add(db_post)
            await self.session.flush()
            await self.session.refresh(db_post)

        logger.info(f"Post created with slug '{slug}'")
        return db_post

    async def update(self, slug: str, fields: dict[str, Any]) -> PostDB:
        """
        Overwrite the given fields of a post.

        Args:
            slug: Post slug
            fields: Column values to set; unknown keys are ignored

        Returns:
            PostDB: Updated post

        Raises:
            PostNotFoundError: If no post has the slug
        """
        db_post = await self.find_by_slug(slug)
        if not db_post:
            raise PostNotFoundError(slug)

        for key, value in fields.items():
            if key in UPDATABLE_FIELDS:
                setattr(db_post, key, value)

        async with self.store_errors("update post"):
            await self.session.flush()
            await self.session.refresh(db_post)

        return db_post

    async def delete(self, slug: str) -> None:
        """
        Delete post by slug.

        Args:
            slug: Post slug

        Raises:
            PostNotFoundError: If no post has the slug
        """
        db_post = await self.find_by_slug(slug)
        if not db_post:
            raise PostNotFoundError(slug)

        async with self.store_errors("delete post"):
            await self.session.delete(db_post)
            await self.session.flush()

        logger.info(f"Post '{slug}' deleted")
