from pathlib import PurePosixPath
from typing import List

from postshelf.schemas.post import Post, Violation

REQUIRED_FIELDS = ("title", "date")


def validate_post(post: Post) -> List[Violation]:
    """Report missing or malformed required fields. Returns [] for a valid post."""
    violations: List[Violation] = []

    def report(field, message):
        violations.append(Violation(slug=post.slug, field=field, message=message))

    if post.title is None:
        report("title", "missing required field: title")
    elif not post.title.strip():
        report("title", "title must not be blank")

    if post.date is None:
        report("date", "missing required field: date")
    elif post.date.tzinfo is None or post.date.utcoffset() is None:
        report("date", "date must carry a timezone offset")

    if post.hero is not None:
        hero = PurePosixPath(post.hero)
        if not post.hero.strip():
            report("hero", "hero must not be blank")
        elif not is_url(post.hero) and (hero.is_absolute() or ".." in hero.parts):
            report("hero", "hero must be a file name relative to the post")

    return violations


def is_url(value: str) -> bool:
    return value.startswith(("http://", "https://"))
