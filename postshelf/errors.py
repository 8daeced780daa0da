from typing import TYPE_CHECKING, List, Sequence

if TYPE_CHECKING:
    from postshelf.schemas.post import Violation


class ContentError(Exception):
    """Base class for content store errors."""


class NotFound(ContentError):
    def __init__(self, slug: str):
        super().__init__(f"No post with slug {slug!r}")
        self.slug = slug


class DuplicateSlug(ContentError):
    def __init__(self, slug: str, locations: Sequence[str]):
        joined = ", ".join(locations)
        super().__init__(f"Slug {slug!r} is used by more than one post: {joined}")
        self.slug = slug
        self.locations: List[str] = list(locations)


class MalformedFrontMatter(ContentError):
    """Raised when a single post is requested and it cannot be loaded cleanly.

    While listing, the same condition is recorded as violations instead.
    """

    def __init__(self, slug: str, violations: Sequence["Violation"]):
        messages = "; ".join(v.message for v in violations) or "invalid front-matter"
        super().__init__(f"Post {slug!r} has malformed front-matter: {messages}")
        self.slug = slug
        self.violations: List["Violation"] = list(violations)
