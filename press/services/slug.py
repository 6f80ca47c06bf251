"""
Slug generation for posts.

A slug is derived deterministically from the title. When it is already
taken, a counter is appended ("hello-world-2", "hello-world-3", ...) until a
free candidate is found. The search is bounded; once exhausted a random
suffix is used instead. Bases are cut short enough that any suffix still
fits the slug column.
"""

from collections.abc import Awaitable, Callable
from re import sub
from secrets import token_hex
from typing import TypeAlias
from unicodedata import normalize

from press.configs import MAX_SLUG_LENGTH, settings
from press.monitoring import get_logger

logger = get_logger(__name__)

FALLBACK_SLUG = "post"

# "-" plus the 8 hex characters of the random fallback suffix.
SUFFIX_RESERVE = 9

SlugLookup: TypeAlias = Callable[[str], Awaitable[bool]]


def slugify(text: str) -> str:
    """
    Turn free text into a lowercase, hyphenated, URL-safe string.

    Accented characters are folded to ASCII; everything else outside
    ``[a-z0-9]`` is dropped or collapsed into single hyphens.

    Examples
    --------
    >>> slugify("Hello World")
    'hello-world'
    >>> slugify("  Olá,   Mundo! ")
    'ola-mundo'
    """
    ascii_text = normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    slug = ascii_text.lower()
    slug = sub(r"[^a-z0-9\s-]", "", slug)
    slug = sub(r"\s+", "-", slug)
    slug = sub(r"-+", "-", slug)
    return slug.strip("-")


class SlugGenerator:
    """
    Resolve unique slugs against the post store.

    Only reads: one existence lookup per candidate. Uniqueness at write
    time is still enforced by the database constraint.
    """

    def __init__(self, exists: SlugLookup, max_attempts: int | None = None) -> None:
        """
        Initialize the generator.

        Args:
            exists: Async callable returning True when a slug is taken
            max_attempts: Candidates to try before falling back to a
                random suffix
        """
        self.exists = exists
        self.max_attempts = max(1, max_attempts or settings.SLUG_MAX_ATTEMPTS)

    async def generate_unique_slug(self, title: str) -> str:
        """
        Derive an unused slug from a title.

        Args:
            title: Post title

        Returns:
            str: Non-empty slug not used by any existing post
        """
        base = slugify(title)[: MAX_SLUG_LENGTH - SUFFIX_RESERVE].rstrip("-") or FALLBACK_SLUG
        candidate = base

        for attempt in range(1, self.max_attempts + 1):
            if not await self.exists(candidate):
                return candidate
            candidate = f"{base}-{attempt + 1}"

        fallback = f"{base}-{token_hex(4)}"
        logger.warning(
            "slug_attempts_exhausted",
            base=base,
            attempts=self.max_attempts,
            fallback=fallback,
        )
        return fallback
