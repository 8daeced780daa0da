import textwrap
from pathlib import Path

import pycouchdb

from postshelf.repos.posts_repo import PostSource, select_source


class FakeCouchDB:
    """
    Minimal in-memory CouchDB stand-in.
    Set track_calls=True to record the order of get() calls.
    """

    def __init__(self, docs: dict, track_calls: bool = False):
        self.docs = docs
        self.track_calls = track_calls
        self.calls = []

    def get(self, doc_id: str) -> dict:
        if self.track_calls:
            self.calls.append(doc_id)
        if doc_id not in self.docs:
            raise pycouchdb.exceptions.NotFound(doc_id)
        return self.docs[doc_id]

    def all(self, include_docs: bool = True):
        if self.track_calls:
            self.calls.append(f"all(include_docs={include_docs})")
        if include_docs:
            return [{"doc": doc} for doc in self.docs.values()]
        return list(self.docs.values())


class FakeParser:
    """
    Minimal LiveSync content parser stand-in, keyed by document id.
    """

    def __init__(self, content_by_id: dict[str, str], binary_by_id=None):
        self.content_by_id = content_by_id
        self.binary_by_id = binary_by_id or {}

    def get_markdown_content(self, doc: dict) -> str:
        raw = self.content_by_id.get(doc.get("_id"))
        if raw is None:
            return ""
        return textwrap.dedent(raw).lstrip()

    def get_binary_content(self, doc: dict) -> bytes | None:
        return self.binary_by_id.get(doc.get("_id"))


class FakeRepo:
    """
    Minimal in-memory post source used in service tests.
    Markdown is dedented so tests can write documents inline.
    """

    def __init__(self, texts: dict[str, str]):
        self.texts = texts
        self.list_calls = 0

    def list_sources(self):
        self.list_calls += 1
        return [
            PostSource(
                slug=slug,
                location=f"{slug}/index.md",
                reader=lambda text=text: textwrap.dedent(text).lstrip(),
            )
            for slug, text in self.texts.items()
        ]

    def get_source(self, slug):
        return select_source(self.list_sources(), slug)


class FakePostsService:
    """
    Minimal posts service stand-in for router tests.
    """

    def __init__(self, posts=None, get_post_return=None, get_post_error=None):
        self._posts = posts or []
        self._get_post_return = get_post_return
        self._get_post_error = get_post_error
        self.include_drafts_calls = []

    def list_posts(self, include_drafts: bool = False):
        self.include_drafts_calls.append(include_drafts)
        listing = FakeListing(
            [p for p in self._posts if include_drafts or not p.draft]
        )
        return listing

    def get_post(self, slug: str):
        if self._get_post_error is not None:
            raise self._get_post_error
        return self._get_post_return

    def check_post(self, slug: str):
        if self._get_post_error is not None:
            raise self._get_post_error
        return []


class FakeListing(list):
    violations: dict = {}


def write_post(root: Path, relative: str, text: str) -> Path:
    """Write a dedented markdown document under a content root."""
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(text).lstrip(), encoding="utf-8")
    return path
