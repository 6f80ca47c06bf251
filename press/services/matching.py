"""Related-post lookup strategies."""

from typing import Protocol

from press.models import PostDB, PostStatus
from press.repositories.post import PostFilter, PostRepository


class RelatedPostMatcher(Protocol):
    """Strategy returning published posts related to a given post."""

    async def find_related(self, post: PostDB, limit: int) -> list[PostDB]: ...


def split_tags(tags: str) -> list[str]:
    """
    Split a comma-separated tag string into its terms, verbatim.

    Terms are not trimmed: " rust" only matches tags containing " rust".
    Empty terms are dropped.

    Examples
    --------
    >>> split_tags("go, rust,,")
    ['go', ' rust']
    """
    return [term for term in tags.split(",") if term]


class TagSubstringMatcher:
    """
    Match posts sharing any tag term as a case-insensitive substring.

    This is an approximate signal: "go" also matches "django". Results are
    ordered by recency only.
    """

    def __init__(self, repo: PostRepository) -> None:
        self.repo = repo

    async def find_related(self, post: PostDB, limit: int) -> list[PostDB]:
        terms = split_tags(post.tags)
        if not terms:
            return []

        post_filter = PostFilter(
            status=PostStatus.PUBLISHED,
            tags_contain_any=tuple(terms),
            exclude_slug=post.slug,
        )
        return await self.repo.find_many(post_filter, limit=limit)
