"""Database models for the application."""

from press.models.post import PostDB, PostStatus
from press.models.user import UserDB

__all__ = ["UserDB", "PostDB", "PostStatus"]
