from typing import List, Optional

from pydantic import BaseModel, Field

from postshelf.schemas.post import Violation


class PostSummary(BaseModel):
    slug: str
    title: str
    date: str
    draft: bool = False
    hero: Optional[str] = None
    heroUrl: Optional[str] = None
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=list)
    readingTime: Optional[str] = None


class PostDetail(PostSummary):
    content: str


class ViolationReport(BaseModel):
    slug: str
    valid: bool
    violations: List[Violation] = Field(default_factory=list)
