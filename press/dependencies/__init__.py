from press.dependencies.dependencies import (
    PipelineDep,
    PostRepoDep,
    StorageDep,
    UserDBDep,
    UserRepoDep,
    get_current_user,
    get_post_repository,
    get_publishing_pipeline,
    get_storage,
    get_user_repository,
    bearer_scheme,
)

__all__ = [
    "PipelineDep",
    "PostRepoDep",
    "StorageDep",
    "UserDBDep",
    "UserRepoDep",
    "get_current_user",
    "get_post_repository",
    "get_publishing_pipeline",
    "get_storage",
    "get_user_repository",
    "bearer_scheme",
]
