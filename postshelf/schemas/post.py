import re
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

MALFORMED_FRONT_MATTER = "MalformedFrontMatter"

_LEADING_BLANK_LINES = re.compile(r"\A(?:[ \t]*\r?\n)+")


def strip_leading_blank_lines(text: str) -> str:
    """Drop the blank lines that separate a body from its front-matter."""
    if not text.strip():
        return ""
    return _LEADING_BLANK_LINES.sub("", text)


class Post(BaseModel):
    slug: str
    title: Optional[str] = None
    date: Optional[datetime] = None
    draft: bool = False
    hero: Optional[str] = None
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=list)
    body: str = ""  # Markdown content without front-matter

    @field_validator("body")
    @classmethod
    def body_starts_at_content(cls, value: str) -> str:
        return strip_leading_blank_lines(value)


class Violation(BaseModel):
    slug: str
    field: Optional[str] = None  # None for whole-document problems
    kind: str = MALFORMED_FRONT_MATTER
    message: str
