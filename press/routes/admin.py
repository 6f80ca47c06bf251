"""
Admin post routes.

Every endpoint requires a bearer token for an existing author. Create and
edit take multipart form data so the cover image travels with the fields.

Rate Limiting
-------------
Limits are keyed per author for authenticated callers (see
`press.managers.rate_limiter.get_identifier`).
"""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from pydantic import ValidationError as PydanticValidationError
from starlette.status import HTTP_201_CREATED, HTTP_204_NO_CONTENT

from press.configs import MAX_BODY_LENGTH, MAX_TAGS_LENGTH, MAX_TITLE_LENGTH
from press.dependencies import PipelineDep, UserDBDep, get_current_user
from press.managers import author_limit, limiter
from press.models import PostStatus
from press.routes.posts import PageQuery, to_list_item, to_post_response
from press.schemas import PostCreate, PostPage, PostResponse, PostUpdate

router = APIRouter(
    prefix="/admin/posts",
    tags=["🛠️ Admin"],
    dependencies=[Depends(get_current_user)],
    responses={
        401: {
            "description": "Missing or invalid bearer token",
            "content": {
                "application/json": {"example": {"detail": "Could not validate credentials"}},
            },
        },
        429: {
            "description": "Rate limit exceeded",
            "content": {"application/json": {"example": {"detail": "Rate limit exceeded"}}},
        },
    },
)


def _as_request_error(e: PydanticValidationError) -> RequestValidationError:
    errors = [{**err, "loc": ("body", *err["loc"])} for err in e.errors(include_url=False)]
    return RequestValidationError(errors)


def _field_error(field: str, error_type: str, message: str) -> RequestValidationError:
    return RequestValidationError(
        [{"type": error_type, "loc": ("body", field), "msg": message, "input": None}],
    )


async def post_create_form(
    request: Request,
    title: Annotated[str, Form(max_length=MAX_TITLE_LENGTH)],
    body: Annotated[str, Form(max_length=MAX_BODY_LENGTH)],
    tags: Annotated[str | None, Form(max_length=MAX_TAGS_LENGTH)] = None,
) -> PostCreate:
    """
    Collect the create form fields into `PostCreate`.

    FastAPI reads an empty form value as absent, so whether `tags` was
    sent is taken from the raw form: `tags=` is an empty tag list, no
    `tags` part at all is a missing field.
    """
    if "tags" not in await request.form():
        raise _field_error("tags", "missing", "Field required")
    try:
        return PostCreate(title=title, tags=tags or "", body=body)
    except PydanticValidationError as e:
        raise _as_request_error(e) from e


async def post_update_form(
    request: Request,
    title: Annotated[str | None, Form(max_length=MAX_TITLE_LENGTH)] = None,
    tags: Annotated[str | None, Form(max_length=MAX_TAGS_LENGTH)] = None,
    body: Annotated[str | None, Form(max_length=MAX_BODY_LENGTH)] = None,
    status: Annotated[PostStatus | None, Form()] = None,
) -> PostUpdate:
    """
    Collect the fields actually sent in an edit form into `PostUpdate`.

    A part sent empty (`tags=`) overwrites the stored value with an empty
    string; a part not sent at all leaves it untouched.
    """
    form = await request.form()
    values = {"title": title, "tags": tags, "body": body, "status": status}
    sent = {key: "" if value is None else value for key, value in values.items() if key in form}
    try:
        return PostUpdate(**sent)
    except PydanticValidationError as e:
        raise _as_request_error(e) from e


async def cover_part(
    request: Request,
    cover: Annotated[UploadFile | None, File(description="JPEG or PNG cover image")] = None,
) -> UploadFile | None:
    """The single `cover` file part; more than one is a validation error."""
    if len((await request.form()).getlist("cover")) > 1:
        raise _field_error("cover", "too_many_files", "Exactly one cover image is allowed")
    return cover


CoverFile = Annotated[UploadFile | None, Depends(cover_part)]


@router.post(
    "",
    status_code=HTTP_201_CREATED,
    response_class=ORJSONResponse,
    response_model=PostResponse,
    summary="Create post",
    description="Create a draft post. A JPEG or PNG cover image is required.",
    responses={
        409: {
            "description": "Slug taken by a concurrent request",
            "content": {
                "application/json": {
                    "example": {
                        "detail": "Slug 'hello-world' was taken by a concurrent request",
                        "slug": "hello-world",
                        "retryable": True,
                    },
                },
            },
        },
        415: {
            "description": "Cover rejected",
            "content": {
                "application/json": {
                    "example": {
                        "detail": "Cover image not allowed or not uploaded. "
                        "Please use a JPEG or PNG image.",
                        "allowed_types": ["image/jpeg", "image/jpg", "image/png"],
                    },
                },
            },
        },
    },
    operation_id="admin_posts_create",
)
@limiter.limit(author_limit("20/minute", "5/minute"))
async def create_post(
    request: Request,
    response: Response,
    user: UserDBDep,
    fields: Annotated[PostCreate, Depends(post_create_form)],
    pipeline: PipelineDep,
    cover: CoverFile,
) -> PostResponse:
    """
    Create a new draft post.

    Parameters
    ----------
    request : Request
        Current request context.
    response : Response
        Response object for rate limit headers.
    user : UserDB
        Authenticated author.
    fields : PostCreate
        Title, tags and body.
    pipeline : PublishingPipeline
        Publishing pipeline.
    cover : UploadFile | None
        Cover image.

    Returns
    -------
    PostResponse
        Created post.
    """
    authored = await pipeline.create(user.id, fields, cover)
    return to_post_response(authored, pipeline.storage)


@router.put(
    "/{slug}",
    response_class=ORJSONResponse,
    response_model=PostResponse,
    summary="Edit post",
    description=(
        "Overwrite any subset of title, tags, body and status, optionally with "
        "a new cover. A rejected cover is ignored and the rest of the edit "
        "still applies. The slug never changes."
    ),
    responses={
        404: {
            "description": "Not found",
            "content": {"application/json": {"example": {"detail": "Post 'x' not found"}}},
        },
    },
    operation_id="admin_posts_edit",
)
@limiter.limit(author_limit("30/minute", "5/minute"))
async def edit_post(
    request: Request,
    response: Response,
    slug: str,
    changes: Annotated[PostUpdate, Depends(post_update_form)],
    pipeline: PipelineDep,
    cover: CoverFile,
) -> PostResponse:
    """Apply a partial update to a post."""
    authored = await pipeline.edit(slug, changes, cover)
    return to_post_response(authored, pipeline.storage)


@router.delete(
    "/{slug}",
    status_code=HTTP_204_NO_CONTENT,
    summary="Delete post",
    description="Permanently delete a post. Its cover file is kept.",
    responses={
        404: {
            "description": "Not found",
            "content": {"application/json": {"example": {"detail": "Post 'x' not found"}}},
        },
    },
    operation_id="admin_posts_delete",
)
@limiter.limit(author_limit("20/minute", "5/minute"))
async def delete_post(
    request: Request,
    response: Response,
    slug: str,
    pipeline: PipelineDep,
) -> None:
    """Delete a post by slug."""
    await pipeline.delete(slug)


@router.get(
    "",
    response_class=ORJSONResponse,
    response_model=PostPage,
    summary="List all posts",
    description="One page of posts in any status, newest first.",
    operation_id="admin_posts_list",
)
@limiter.limit(author_limit("60/minute", "10/minute"))
async def list_all_posts(
    request: Request,
    response: Response,
    pipeline: PipelineDep,
    page: PageQuery = 1,
) -> PostPage:
    """List posts of every status for the admin view."""
    posts = await pipeline.list_all(page)
    return PostPage(page=page, posts=[to_list_item(p, pipeline.storage) for p in posts])
