"""Application dependencies: sessions, repositories, pipeline and principal."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_401_UNAUTHORIZED

from press.db import get_session
from press.models import UserDB
from press.monitoring import bind_author
from press.repositories import PostRepository, UserRepository
from press.services import FileStorage, PublishingPipeline, get_storage_service, resolve_principal

bearer_scheme = HTTPBearer(
    auto_error=False,
    description="Access token printed by scripts/create_author.py",
)


def get_post_repository(session: Annotated[AsyncSession, Depends(get_session)]) -> PostRepository:
    """
    Resolve the `PostRepository` dependency.

    Parameters
    ----------
    session : AsyncSession
        Database session.

    Returns
    -------
    PostRepository
        Repository instance bound to the session.
    """
    return PostRepository(session)


def get_user_repository(session: Annotated[AsyncSession, Depends(get_session)]) -> UserRepository:
    """
    Resolve the `UserRepository` dependency.

    Parameters
    ----------
    session : AsyncSession
        Database session.

    Returns
    -------
    UserRepository
        Repository instance bound to the session.
    """
    return UserRepository(session)


PostRepoDep = Annotated[PostRepository, Depends(get_post_repository)]
UserRepoDep = Annotated[UserRepository, Depends(get_user_repository)]


@lru_cache
def get_storage() -> FileStorage:
    """Process-wide cover storage backend."""
    return get_storage_service()


StorageDep = Annotated[FileStorage, Depends(get_storage)]


def get_publishing_pipeline(
    posts: PostRepoDep,
    users: UserRepoDep,
    storage: StorageDep,
) -> PublishingPipeline:
    """
    Build the publishing pipeline for the current request.

    Both repositories share the request's session, so everything the
    pipeline writes commits or rolls back together.
    """
    return PublishingPipeline(posts, users, storage)


PipelineDep = Annotated[PublishingPipeline, Depends(get_publishing_pipeline)]


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    users: UserRepoDep,
) -> UserDB:
    """
    Get the authenticated author from the bearer token.

    Parameters
    ----------
    credentials : HTTPAuthorizationCredentials | None
        Parsed `Authorization: Bearer` header, if any.
    users : UserRepository
        User repository.

    Returns
    -------
    UserDB
        Current authenticated user.

    Raises
    ------
    HTTPException
        401 if the token is missing, invalid or its user no longer exists.
    """
    user = await resolve_principal(credentials.credentials, users) if credentials else None
    if user is None:
        raise HTTPException(
            status_code=HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    bind_author(user.id)
    return user


UserDBDep = Annotated[UserDB, Depends(get_current_user)]
