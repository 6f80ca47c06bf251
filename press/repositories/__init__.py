"""Repository layer for database operations."""

from press.repositories.post import PostFilter, PostRepository
from press.repositories.user import UserRepository

__all__ = ["PostFilter", "PostRepository", "UserRepository"]
