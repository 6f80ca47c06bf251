"""
Post schemas for the Press application.

Request models describe what an author may send; response models are
what the API returns, with the cover file name already turned into a
public URL and the author's display name joined in.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from press.configs import MAX_BODY_LENGTH, MAX_TAGS_LENGTH, MAX_TITLE_LENGTH
from press.models import PostStatus


def reject_blank_title(v: str | None) -> str | None:
    """Reject titles made only of whitespace."""
    if v is not None and not v.strip():
        mssg = "Title must not be blank"
        raise ValueError(mssg)
    return v


class PostCreate(BaseModel):
    """Post creation fields (the cover arrives as a separate file part)."""

    title: str = Field(
        ...,
        min_length=1,
        max_length=MAX_TITLE_LENGTH,
        description="Post title",
        examples=["Hello World"],
    )
    tags: str = Field(
        ...,
        max_length=MAX_TAGS_LENGTH,
        description="Comma-separated tag terms (may be empty)",
        examples=["go,rust"],
    )
    body: str = Field(
        ...,
        max_length=MAX_BODY_LENGTH,
        description="Post body",
    )

    validate_title_not_blank = field_validator("title", mode="after")(reject_blank_title)


class PostUpdate(BaseModel):
    """Post update model (all fields optional, absent fields stay untouched)."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Hello World, Revisited",
                "status": "PUBLISHED",
            },
        },
    )

    title: str | None = Field(default=None, min_length=1, max_length=MAX_TITLE_LENGTH)
    tags: str | None = Field(default=None, max_length=MAX_TAGS_LENGTH)
    body: str | None = Field(default=None, max_length=MAX_BODY_LENGTH)
    status: PostStatus | None = None

    validate_title_not_blank = field_validator("title", mode="after")(reject_blank_title)


class PostResponse(BaseModel):
    """Post response model (safe for API responses)."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: int
    slug: str
    title: str
    body: str
    tags: str
    status: PostStatus
    cover: str | None = Field(default=None, description="Public cover URL")
    author_name: str | None = Field(default=None, alias="authorName")
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")


class PostListItem(BaseModel):
    """Post list item response (lightweight for listing)."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: int
    slug: str
    title: str
    tags: str
    status: PostStatus
    cover: str | None = None
    created_at: datetime = Field(alias="createdAt")


class PostPage(BaseModel):
    """One page of posts."""

    page: int
    posts: list[PostListItem]


class RelatedPosts(BaseModel):
    """Posts related to a given post by shared tag terms."""

    slug: str
    posts: list[PostListItem]
