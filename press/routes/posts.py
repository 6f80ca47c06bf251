"""
Public post routes.

Summary
-------
Endpoints include:
  - List published posts (paged, five per page)
  - Get a published post by slug
  - Related posts by shared tag terms

Drafts are never visible here; authors see them through `/admin/posts`.
"""

from typing import Annotated

from fastapi import APIRouter, Query, Request, Response
from fastapi.responses import ORJSONResponse

from press.dependencies import PipelineDep
from press.managers import limiter
from press.models import PostDB
from press.schemas import PostListItem, PostPage, PostResponse, RelatedPosts
from press.services import AuthoredPost, FileStorage

router = APIRouter(prefix="/posts", tags=["📰 Posts"])

PageQuery = Annotated[int, Query(description="1-indexed page number; pages below 1 are empty")]


def cover_url(storage: FileStorage, cover: str | None) -> str | None:
    return storage.to_public_url(cover) if cover else None


def to_post_response(authored: AuthoredPost, storage: FileStorage) -> PostResponse:
    """
    Convert a post and its author name to `PostResponse`.

    Parameters
    ----------
    authored : AuthoredPost
        Post with the author's display name.
    storage : FileStorage
        Storage used to build the public cover URL.

    Returns
    -------
    PostResponse
        Validated response model.
    """
    post = authored.post
    return PostResponse(
        id=post.id,
        slug=post.slug,
        title=post.title,
        body=post.body,
        tags=post.tags,
        status=post.status,
        cover=cover_url(storage, post.cover),
        author_name=authored.author_name,
        created_at=post.created_at,
        updated_at=post.updated_at,
    )


def to_list_item(post: PostDB, storage: FileStorage) -> PostListItem:
    """Convert a post to the lightweight listing model."""
    return PostListItem(
        id=post.id,
        slug=post.slug,
        title=post.title,
        tags=post.tags,
        status=post.status,
        cover=cover_url(storage, post.cover),
        created_at=post.created_at,
    )


@router.get(
    "",
    response_class=ORJSONResponse,
    response_model=PostPage,
    summary="List published posts",
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {
                        "page": 1,
                        "posts": [
                            {
                                "id": 1,
                                "slug": "hello-world",
                                "title": "Hello World",
                                "tags": "go,rust",
                                "status": "PUBLISHED",
                                "cover": "http://localhost:8000/uploads/covers/3f1c.jpg",
                                "createdAt": "2025-01-01T10:00:00Z",
                            },
                        ],
                    },
                },
            },
        },
        429: {
            "description": "Rate limit exceeded",
            "content": {"application/json": {"example": {"detail": "Rate limit exceeded"}}},
        },
    },
    operation_id="posts_list",
)
@limiter.limit("60/minute")
async def list_posts(
    request: Request,
    response: Response,
    pipeline: PipelineDep,
    page: PageQuery = 1,
) -> PostPage:
    """List one page of published posts, newest first."""
    posts = await pipeline.list_published(page)
    return PostPage(page=page, posts=[to_list_item(p, pipeline.storage) for p in posts])


@router.get(
    "/{slug}",
    response_class=ORJSONResponse,
    response_model=PostResponse,
    summary="Get published post by slug",
    responses={
        404: {
            "description": "Not found",
            "content": {"application/json": {"example": {"detail": "Post 'x' not found"}}},
        },
    },
    operation_id="posts_get_by_slug",
)
@limiter.limit("60/minute")
async def get_post(
    request: Request,
    response: Response,
    slug: str,
    pipeline: PipelineDep,
) -> PostResponse:
    """Get a published post with its author's name."""
    authored = await pipeline.get(slug)
    return to_post_response(authored, pipeline.storage)


@router.get(
    "/{slug}/related",
    response_class=ORJSONResponse,
    response_model=RelatedPosts,
    summary="Related posts",
    description=(
        "Up to four other published posts whose tags contain any of this "
        "post's tag terms, newest first. Unknown slugs yield an empty list."
    ),
    operation_id="posts_related",
)
@limiter.limit("60/minute")
async def related_posts(
    request: Request,
    response: Response,
    slug: str,
    pipeline: PipelineDep,
) -> RelatedPosts:
    """List posts related to `slug` by shared tag terms."""
    posts = await pipeline.find_related(slug)
    return RelatedPosts(slug=slug, posts=[to_list_item(p, pipeline.storage) for p in posts])
