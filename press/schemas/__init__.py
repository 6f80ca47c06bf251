from press.schemas.auth import TokenData
from press.schemas.health import HealthCheckResponse
from press.schemas.post import (
    PostCreate,
    PostListItem,
    PostPage,
    PostResponse,
    PostUpdate,
    RelatedPosts,
)

__all__ = [
    "HealthCheckResponse",
    "TokenData",
    "PostCreate",
    "PostListItem",
    "PostPage",
    "PostResponse",
    "PostUpdate",
    "RelatedPosts",
]
