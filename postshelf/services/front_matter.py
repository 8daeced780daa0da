"""
Front-matter codec for post documents.

A post document is a YAML block fenced by ``---`` lines followed by a
markdown body. Parsing never raises on bad input: each field is coerced on
its own and every problem is returned as a Violation, so one broken field
does not hide the rest of the post.
"""

import datetime
import logging
import math
from typing import Any, List, NamedTuple, Optional
from zoneinfo import ZoneInfo

import frontmatter
import yaml

from postshelf.schemas.post import Post, Violation, strip_leading_blank_lines
from postshelf.settings import settings

logger = logging.getLogger(__name__)

_handler = frontmatter.YAMLHandler()

_TRUE_STRINGS = {"true", "yes", "on"}
_FALSE_STRINGS = {"false", "no", "off"}


class _TextTimestampLoader(yaml.SafeLoader):
    """SafeLoader that keeps timestamp scalars as plain strings."""


_TextTimestampLoader.add_constructor(
    "tag:yaml.org,2002:timestamp", yaml.SafeLoader.construct_yaml_str
)


class ParsedPost(NamedTuple):
    post: Optional[Post]
    violations: List[Violation]


def parse_post(
    text: str, slug: str, default_tz: Optional[datetime.tzinfo] = None
) -> ParsedPost:
    """Parse a markdown document into a Post plus any front-matter violations.

    ``post`` is None only when the front-matter block itself is unusable.
    The body keeps its whitespace; only blank lines after the closing fence
    are dropped.
    """
    tz = default_tz or ZoneInfo(settings.DEFAULT_TIMEZONE)
    text = (text or "").lstrip("\ufeff").lstrip()

    if not _handler.detect(text):
        return ParsedPost(None, [_violation(slug, None, "no front-matter block found")])

    try:
        raw_fm, content = _handler.split(text)
    except ValueError:
        return ParsedPost(
            None, [_violation(slug, None, "front-matter block is not closed")]
        )

    try:
        metadata = _load_metadata(raw_fm, slug)
    except yaml.YAMLError as e:
        logger.debug(f"YAML error in {slug}: {e}")
        return ParsedPost(
            None, [_violation(slug, None, f"front-matter is not valid YAML: {e}")]
        )
    except ValueError as e:
        return ParsedPost(
            None, [_violation(slug, None, f"front-matter has an invalid value: {e}")]
        )

    if metadata is None:
        metadata = {}
    if not isinstance(metadata, dict):
        return ParsedPost(
            None,
            [_violation(slug, None, "front-matter must be a mapping of keys to values")],
        )

    violations: List[Violation] = []
    fields: dict = {"slug": slug, "body": strip_leading_blank_lines(content)}

    for name in ("title", "hero", "description"):
        value, problem = _coerce_string(metadata.get(name))
        if problem:
            violations.append(_violation(slug, name, problem))
        else:
            fields[name] = value

    date, problem = _coerce_date(metadata.get("date"), tz)
    if problem:
        violations.append(_violation(slug, "date", problem))
    else:
        fields["date"] = date

    draft, problem = _coerce_bool(metadata.get("draft"))
    if problem:
        violations.append(_violation(slug, "draft", problem))
    else:
        fields["draft"] = draft

    for name in ("tags", "categories"):
        values, problem = _coerce_string_list(metadata.get(name))
        if problem:
            violations.append(_violation(slug, name, problem))
        else:
            fields[name] = values

    return ParsedPost(Post(**fields), violations)


def dump_post(post: Post) -> str:
    """Serialize a Post back into a front-matter document."""
    metadata: dict = {}
    if post.title is not None:
        metadata["title"] = post.title
    if post.date is not None:
        metadata["date"] = post.date.isoformat()
    metadata["draft"] = post.draft
    if post.hero is not None:
        metadata["hero"] = post.hero
    if post.description is not None:
        metadata["description"] = post.description
    if post.tags:
        metadata["tags"] = list(post.tags)
    if post.categories:
        metadata["categories"] = list(post.categories)

    # Assembled by hand: frontmatter.dumps strips whitespace around the body.
    fm = _handler.export(metadata, sort_keys=False)
    return (
        f"{_handler.START_DELIMITER}\n{fm}\n{_handler.END_DELIMITER}\n\n{post.body}"
    )


def calculate_reading_time(text: str) -> str:
    words = text.split()
    minutes = math.ceil(len(words) / 200) or 1
    return f"{minutes} min"


def _load_metadata(raw_fm: str, slug: str) -> Any:
    try:
        return _handler.load(raw_fm)
    except ValueError as e:
        # PyYAML raises ValueError for impossible timestamps like 2022-02-30.
        # Reload with timestamps as text so the date check names the field.
        logger.debug(f"Reloading front-matter of {slug} after: {e}")
        return _handler.load(raw_fm, Loader=_TextTimestampLoader)


def _violation(slug: str, field: Optional[str], message: str) -> Violation:
    return Violation(slug=slug, field=field, message=message)


def _coerce_string(value: Any):
    if value is None:
        return None, None
    if isinstance(value, str):
        return value, None
    if isinstance(value, bool):
        return None, f"expected a string, got {value!r} (quote words like yes or on)"
    if isinstance(value, (int, float)):
        return str(value), None
    return None, f"expected a string, got {type(value).__name__}"


def _coerce_date(value: Any, tz: datetime.tzinfo):
    if value is None:
        return None, None
    if isinstance(value, datetime.datetime):
        parsed = value
    elif isinstance(value, datetime.date):
        parsed = datetime.datetime.combine(value, datetime.time.min)
    elif isinstance(value, str):
        try:
            parsed = datetime.datetime.fromisoformat(value.strip())
        except ValueError:
            return None, f"not a valid timestamp: {value!r}"
    else:
        return None, f"not a valid timestamp: {value!r}"

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed, None


def _coerce_bool(value: Any):
    if value is None:
        return False, None
    if isinstance(value, bool):
        return value, None
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True, None
        if lowered in _FALSE_STRINGS:
            return False, None
    return None, f"expected true or false, got {value!r}"


def _coerce_string_list(value: Any):
    if value is None:
        return [], None
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple, set)):
        return None, f"expected a list of strings, got {type(value).__name__}"

    result: List[str] = []
    for item in value:
        if item is None:
            continue
        if isinstance(item, (list, dict)):
            return None, "expected a list of strings, found a nested value"
        text = str(item).strip()
        if text and text not in result:
            result.append(text)
    return result, None
