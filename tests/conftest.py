# tests/conftest.py
"""Root pytest configuration and shared fixtures."""

import os
from collections.abc import Sequence
from datetime import timedelta
from io import BytesIO
from itertools import count
from pathlib import Path
from tempfile import mkdtemp
from typing import Any

# Settings are read at import time, so the environment must be ready
# before anything from press is imported.
os.environ["UPLOADS_DIR"] = mkdtemp(prefix="press-uploads-")
os.environ["LOG_TO_FILE"] = "false"
os.environ["ENVIRONMENT"] = "testing"
os.environ["SECRET_KEY"] = "test-secret-key-with-enough-length"
os.environ["PUBLIC_BASE_URL"] = "http://test"

import pytest
from PIL import Image

from press.errors import DuplicateEntryError, PostNotFoundError
from press.models import PostDB, PostStatus, UserDB
from press.models.post import utc_now
from press.repositories.post import UPDATABLE_FIELDS, PostFilter
from press.services.storage import LocalStorage


class FakeUpload:
    """Minimal stand-in for `UploadFile` backed by bytes."""

    def __init__(
        self,
        data: bytes,
        content_type: str | None = "image/jpeg",
        filename: str | None = "cover.jpg",
    ) -> None:
        self._buffer = BytesIO(data)
        self.content_type = content_type
        self.filename = filename

    async def read(self, size: int = -1) -> bytes:
        return self._buffer.read(size)


class InMemoryPostRepository:
    """Dict-backed post store mirroring `PostRepository`'s contract."""

    def __init__(self) -> None:
        self.rows: dict[str, PostDB] = {}
        self.create_errors: list[Exception] = []
        self.create_calls = 0
        self._ids = count(1)
        self._last_created = utc_now()

    async def find_by_slug(self, slug: str) -> PostDB | None:
        return self.rows.get(slug)

    async def slug_exists(self, slug: str) -> bool:
        return slug in self.rows

    async def find_many(
        self,
        post_filter: PostFilter,
        *,
        limit: int,
        offset: int = 0,
    ) -> list[PostDB]:
        rows = [p for p in self.rows.values() if self._matches(p, post_filter)]
        rows.sort(key=lambda p: p.created_at, reverse=True)
        return rows[offset : offset + limit]

    @staticmethod
    def _matches(post: PostDB, post_filter: PostFilter) -> bool:
        if post_filter.status is not None and post.status != post_filter.status.value:
            return False
        if post_filter.exclude_slug is not None and post.slug == post_filter.exclude_slug:
            return False
        if post_filter.tags_contain_any:
            tags = post.tags.lower()
            return any(term.lower() in tags for term in post_filter.tags_contain_any)
        return True

    async def create(self, post: Any, *, author_id: int, slug: str, cover: str) -> PostDB:
        self.create_calls += 1
        if self.create_errors:
            raise self.create_errors.pop(0)
        if slug in self.rows:
            raise DuplicateEntryError(detail=f"duplicate key value violates unique constraint: {slug}")

        # strictly increasing so newest-first ordering is unambiguous
        now = max(utc_now(), self._last_created + timedelta(microseconds=1))
        self._last_created = now
        db_post = PostDB(
            id=next(self._ids),
            author_id=author_id,
            slug=slug,
            title=post.title,
            tags=post.tags,
            body=post.body,
            cover=cover,
            status=PostStatus.DRAFT.value,
            created_at=now,
            updated_at=now,
        )
        self.rows[slug] = db_post
        return db_post

    async def update(self, slug: str, fields: dict[str, Any]) -> PostDB:
        db_post = self.rows.get(slug)
        if db_post is None:
            raise PostNotFoundError(slug)
        for key, value in fields.items():
            if key in UPDATABLE_FIELDS:
                setattr(db_post, key, value)
        return db_post

    async def delete(self, slug: str) -> None:
        if slug not in self.rows:
            raise PostNotFoundError(slug)
        del self.rows[slug]

    def seed(
        self,
        slug: str,
        *,
        tags: str = "",
        status: PostStatus = PostStatus.PUBLISHED,
        author_id: int = 1,
    ) -> PostDB:
        """Insert a post directly, bypassing the pipeline."""
        now = max(utc_now(), self._last_created + timedelta(microseconds=1))
        self._last_created = now
        db_post = PostDB(
            id=next(self._ids),
            author_id=author_id,
            slug=slug,
            title=slug.replace("-", " ").title(),
            tags=tags,
            body="body",
            cover="seed.jpg",
            status=status.value,
            created_at=now,
            updated_at=now,
        )
        self.rows[slug] = db_post
        return db_post


class InMemoryUserRepository:
    """Dict-backed author lookup."""

    def __init__(self, users: Sequence[UserDB] = ()) -> None:
        self.users = {u.id: u for u in users}

    async def get_by_id(self, user_id: int) -> UserDB | None:
        return self.users.get(user_id)


def image_bytes(fmt: str = "JPEG", size: tuple[int, int] = (64, 64)) -> bytes:
    mode = "RGBA" if fmt == "PNG" else "RGB"
    img = Image.new(mode, size, color="red")
    buffer = BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def valid_jpeg_bytes() -> bytes:
    """Create valid JPEG image bytes."""
    return image_bytes("JPEG")


@pytest.fixture
def valid_png_bytes() -> bytes:
    """Create valid PNG image bytes."""
    return image_bytes("PNG")


@pytest.fixture
def author() -> UserDB:
    """A persisted author."""
    return UserDB(id=1, name="Ana Souza", email="ana@example.com")


@pytest.fixture
def post_repo() -> InMemoryPostRepository:
    return InMemoryPostRepository()


@pytest.fixture
def user_repo(author: UserDB) -> InMemoryUserRepository:
    return InMemoryUserRepository([author])


@pytest.fixture
def storage(tmp_path: Path) -> LocalStorage:
    """Local storage rooted in a per-test directory."""
    return LocalStorage(
        covers_dir=tmp_path / "covers",
        tmp_dir=tmp_path / "tmp",
        public_base_url="http://test",
    )


@pytest.fixture
def jpeg_upload(valid_jpeg_bytes: bytes) -> FakeUpload:
    return FakeUpload(valid_jpeg_bytes, "image/jpeg", "cover.jpg")


@pytest.fixture
def png_upload(valid_png_bytes: bytes) -> FakeUpload:
    return FakeUpload(valid_png_bytes, "image/png", "cover.png")


@pytest.fixture
def text_upload() -> FakeUpload:
    return FakeUpload(b"plain text", "text/plain", "notes.txt")
