"""Services package for business logic."""

from press.services.auth import resolve_principal
from press.services.cover import CoverIngestor, UploadLike
from press.services.matching import RelatedPostMatcher, TagSubstringMatcher, split_tags
from press.services.publishing import AuthoredPost, PublishingPipeline
from press.services.slug import SlugGenerator, slugify
from press.services.storage import FileStorage, LocalStorage, get_storage_service

__all__ = [
    "AuthoredPost",
    "CoverIngestor",
    "FileStorage",
    "LocalStorage",
    "PublishingPipeline",
    "RelatedPostMatcher",
    "SlugGenerator",
    "TagSubstringMatcher",
    "UploadLike",
    "get_storage_service",
    "resolve_principal",
    "slugify",
    "split_tags",
]
