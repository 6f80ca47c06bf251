"""Tests for related-post matching."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from press.models import PostStatus
from press.services.matching import TagSubstringMatcher, split_tags

from conftest import InMemoryPostRepository


@pytest.mark.parametrize(
    ("tags", "expected"),
    [
        ("go,rust", ["go", "rust"]),
        (" go , rust ", [" go ", " rust "]),
        ("go, rust", ["go", " rust"]),
        ("go,,rust,", ["go", "rust"]),
        ("", []),
        (",,", []),
        (" , ", [" ", " "]),
        ("single", ["single"]),
    ],
)
def test_split_tags(tags: str, expected: list[str]) -> None:
    assert split_tags(tags) == expected


class TestTagSubstringMatcher:
    """Test cases for TagSubstringMatcher."""

    async def test_builds_filter_from_terms(self, post_repo: InMemoryPostRepository) -> None:
        source = post_repo.seed("source", tags="go,rust")
        repo = MagicMock()
        repo.find_many = AsyncMock(return_value=[])

        await TagSubstringMatcher(repo).find_related(source, 4)

        post_filter = repo.find_many.await_args.args[0]
        assert post_filter.status == PostStatus.PUBLISHED
        assert tuple(post_filter.tags_contain_any) == ("go", "rust")
        assert post_filter.exclude_slug == "source"
        assert repo.find_many.await_args.kwargs == {"limit": 4}

    async def test_no_terms_skips_query(self, post_repo: InMemoryPostRepository) -> None:
        source = post_repo.seed("source", tags=",,")
        repo = MagicMock()
        repo.find_many = AsyncMock()

        assert await TagSubstringMatcher(repo).find_related(source, 4) == []
        repo.find_many.assert_not_awaited()

    async def test_substring_case_insensitive_any_term(
        self,
        post_repo: InMemoryPostRepository,
    ) -> None:
        source = post_repo.seed("source", tags="Go,rust")
        post_repo.seed("django", tags="django,python")
        post_repo.seed("rusty", tags="RUSTY")
        post_repo.seed("java", tags="java")

        related = await TagSubstringMatcher(post_repo).find_related(source, 4)

        assert {p.slug for p in related} == {"django", "rusty"}

    async def test_terms_are_matched_verbatim(self, post_repo: InMemoryPostRepository) -> None:
        source = post_repo.seed("source", tags="go, rust")
        post_repo.seed("rust-python", tags="rust,python")
        post_repo.seed("go-rust", tags="c, rust")

        related = await TagSubstringMatcher(post_repo).find_related(source, 4)

        assert {p.slug for p in related} == {"go-rust"}
