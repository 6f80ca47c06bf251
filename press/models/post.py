"""Post database model using SQLModel."""

from datetime import UTC, datetime
from enum import StrEnum
from typing import cast

from pydantic import ConfigDict
from sqlalchemy import DateTime, Index, Integer, Text
from sqlalchemy.orm import declared_attr
from sqlmodel import Column, Field, ForeignKey, SQLModel, String

from press.configs import MAX_SLUG_LENGTH


class PostStatus(StrEnum):
    """Publication state of a post."""

    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(tz=UTC)


class PostDB(SQLModel, table=True):
    """
    Post database model for PostgreSQL.

    The slug is the public key of a post. It is assigned once at creation
    and never recomputed, even when the title changes. `cover` holds the
    stored file name of the cover image, not its URL.
    """

    __tablename__ = cast("declared_attr[str]", "posts")

    __table_args__ = (
        Index("ix_posts_status_created", "status", "created_at"),
        Index("ix_posts_author_status", "author_id", "status"),
    )

    id: int | None = Field(
        default=None,
        primary_key=True,
        description="Post ID",
    )

    author_id: int = Field(
        sa_column=Column(
            "author_id",
            Integer,
            ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        description="Author ID (foreign key to users.id)",
    )

    slug: str = Field(
        sa_column=Column(String(MAX_SLUG_LENGTH), unique=True, nullable=False, index=True),
        description="URL-friendly slug (unique)",
    )
    title: str = Field(
        sa_column=Column(String(100), nullable=False),
        description="Post title",
    )
    body: str = Field(
        sa_column=Column(Text, nullable=False),
        description="Post body",
    )
    tags: str = Field(
        default="",
        sa_column=Column(String(255), nullable=False, server_default=""),
        description="Comma-separated tag terms",
    )
    cover: str | None = Field(
        default=None,
        sa_column=Column(String(255)),
        description="Stored cover image file name",
    )
    status: PostStatus = Field(
        default=PostStatus.DRAFT,
        sa_column=Column(String(20), nullable=False, index=True, server_default="DRAFT"),
        description="Post status (DRAFT, PUBLISHED)",
    )

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True),
        description="Creation timestamp",
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
        description="Last update timestamp",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 1,
                "author_id": 1,
                "slug": "hello-world",
                "title": "Hello World",
                "body": "First post on the new blog.",
                "tags": "go,rust",
                "cover": "0c8d8f0e-3c5e-4d7b-9a4e-2f1f7b2c9d11.jpg",
                "status": "DRAFT",
            },
        },
    )
