"""
Post publishing pipeline.

Turns raw author input into durable posts: resolves a unique slug, ingests
the cover image, and writes through the post repository. Also serves the
read side (paged listings, single lookup, related posts).

Create and Edit treat a rejected cover differently on purpose. A post
cannot be created without a cover, so rejection aborts Create; Edit keeps
the current cover and applies the other changes.
"""

from dataclasses import dataclass
from datetime import timedelta

from press.configs import settings
from press.errors import (
    CoverRejectedError,
    DuplicateEntryError,
    PostNotFoundError,
    SlugConflictError,
    ValidationError,
)
from press.models import PostDB, PostStatus
from press.models.post import utc_now
from press.monitoring import get_logger
from press.repositories import PostFilter, PostRepository, UserRepository
from press.schemas import PostCreate, PostUpdate
from press.services.cover import CoverIngestor, UploadLike
from press.services.matching import RelatedPostMatcher, TagSubstringMatcher
from press.services.slug import SlugGenerator
from press.services.storage import FileStorage, get_storage_service

logger = get_logger(__name__)

# A slug lost to a concurrent writer is resolved again this many times.
SLUG_CONFLICT_RETRIES = 1


@dataclass
class AuthoredPost:
    """A post together with its author's display name."""

    post: PostDB
    author_name: str | None


class PublishingPipeline:
    """Orchestrates slug generation, cover ingestion and persistence."""

    def __init__(
        self,
        posts: PostRepository,
        users: UserRepository,
        storage: FileStorage | None = None,
        *,
        ingestor: CoverIngestor | None = None,
        slugs: SlugGenerator | None = None,
        matcher: RelatedPostMatcher | None = None,
        page_size: int | None = None,
        related_limit: int | None = None,
    ) -> None:
        """
        Initialize the pipeline.

        Args:
            posts: Post repository bound to the request session
            users: User repository used for the author name join
            storage: Cover storage. Defaults to the configured backend.
            ingestor: Cover ingestor. Defaults to one over `storage`.
            slugs: Slug generator. Defaults to one checking `posts`.
            matcher: Related-post strategy. Defaults to tag substring matching.
            page_size: Posts per listing page
            related_limit: Maximum related posts returned
        """
        self.posts = posts
        self.users = users
        self.storage = storage or get_storage_service()
        self.ingestor = ingestor or CoverIngestor(self.storage)
        self.slugs = slugs or SlugGenerator(posts.slug_exists)
        self.matcher = matcher or TagSubstringMatcher(posts)
        self.page_size = page_size or settings.POSTS_PAGE_SIZE
        self.related_limit = related_limit or settings.RELATED_POSTS_LIMIT

    async def create(
        self,
        author_id: int,
        fields: PostCreate,
        cover: UploadLike | None,
    ) -> AuthoredPost:
        """
        Create a draft post.

        Args:
            author_id: ID of the authenticated author
            fields: Validated title, tags and body
            cover: Uploaded cover image

        Returns:
            AuthoredPost: The stored post with its author name

        Raises:
            ValidationError: If no cover was sent
            CoverRejectedError: If the cover could not be ingested
            SlugConflictError: If concurrent writers kept taking the slug
        """
        if cover is None:
            raise ValidationError.for_field("cover", "A cover image is required")

        stored_name = await self.ingestor.ingest(cover)
        if stored_name is None:
            raise CoverRejectedError(self.ingestor.allowed_types)

        try:
            post = await self._insert(author_id, fields, stored_name)
        except Exception:
            await self.storage.remove(stored_name)
            raise

        logger.info("post_created", slug=post.slug, author_id=author_id)
        return await self._with_author(post)

    async def _insert(self, author_id: int, fields: PostCreate, cover: str) -> PostDB:
        attempt = 0
        while True:
            slug = await self.slugs.generate_unique_slug(fields.title)
            try:
                return await self.posts.create(fields, author_id=author_id, slug=slug, cover=cover)
            except DuplicateEntryError as e:
                if attempt >= SLUG_CONFLICT_RETRIES:
                    raise SlugConflictError(slug) from e
                attempt += 1
                logger.warning("slug_conflict_retry", slug=slug, attempt=attempt)

    async def edit(
        self,
        slug: str,
        changes: PostUpdate,
        cover: UploadLike | None = None,
    ) -> AuthoredPost:
        """
        Apply a partial update to a post.

        Only fields present in `changes` are written. The slug is never
        recomputed, even when the title changes.

        Args:
            slug: Slug of the post to edit
            changes: Fields to overwrite
            cover: Optional replacement cover

        Returns:
            AuthoredPost: The updated post with its author name

        Raises:
            PostNotFoundError: If no post has the slug
        """
        existing = await self.posts.find_by_slug(slug)
        if existing is None:
            raise PostNotFoundError(slug)

        fields = changes.model_dump(exclude_unset=True, exclude_none=True)

        new_cover = None
        if cover is not None:
            new_cover = await self.ingestor.ingest(cover)
            if new_cover is None:
                logger.warning("cover_replacement_skipped", slug=slug)
            else:
                fields["cover"] = new_cover

        # updated_at must move forward even when two edits share a clock tick
        fields["updated_at"] = max(utc_now(), existing.updated_at + timedelta(microseconds=1))

        try:
            post = await self.posts.update(slug, fields)
        except Exception:
            if new_cover is not None:
                await self.storage.remove(new_cover)
            raise

        logger.info("post_edited", slug=slug, fields=sorted(fields))
        return await self._with_author(post)

    async def delete(self, slug: str) -> None:
        """
        Permanently delete a post. Its cover file is left in place.

        Raises:
            PostNotFoundError: If no post has the slug
        """
        await self.posts.delete(slug)
        logger.info("post_deleted", slug=slug)

    async def list_published(self, page: int) -> list[PostDB]:
        """One page of published posts, newest first."""
        return await self._page(PostFilter(status=PostStatus.PUBLISHED), page)

    async def list_all(self, page: int) -> list[PostDB]:
        """One page of posts in any status, newest first."""
        return await self._page(PostFilter(), page)

    async def _page(self, post_filter: PostFilter, page: int) -> list[PostDB]:
        if page <= 0:
            return []
        offset = (page - 1) * self.page_size
        return await self.posts.find_many(post_filter, limit=self.page_size, offset=offset)

    async def get(self, slug: str) -> AuthoredPost:
        """
        Look up a published post.

        Raises:
            PostNotFoundError: If no post has the slug or it is still a draft
        """
        post = await self.posts.find_by_slug(slug)
        if post is None or post.status != PostStatus.PUBLISHED:
            raise PostNotFoundError(slug)
        return await self._with_author(post)

    async def find_related(self, slug: str) -> list[PostDB]:
        """
        Published posts sharing a tag term with the given post.

        Returns an empty list when the post does not exist or has no tags.
        """
        post = await self.posts.find_by_slug(slug)
        if post is None:
            return []
        return await self.matcher.find_related(post, self.related_limit)

    async def _with_author(self, post: PostDB) -> AuthoredPost:
        author = await self.users.get_by_id(post.author_id)
        return AuthoredPost(post=post, author_name=author.name if author else None)
