import base64
from unittest.mock import patch

import pycouchdb
import pytest

from postshelf.services.content_parser import ContentParser


class MockDB:
    """Minimal CouchDB stand-in returning preloaded docs by id."""

    def __init__(self, docs: dict[str, dict]):
        self.docs = docs

    def get(self, doc_id: str) -> dict:
        if doc_id not in self.docs:
            raise pycouchdb.exceptions.NotFound(doc_id)
        return self.docs[doc_id]


def test_get_markdown_content_concatenates_chunks():
    parent = {
        "_id": "posts/cqrs/index.md",
        "type": "plain",
        "children": ["chunk-1", "chunk-2", "chunk-3"],
    }
    docs = {
        "chunk-1": {"type": "leaf", "data": "---\ntitle: CQRS\n---\n"},
        "chunk-2": {"type": "leaf", "data": "Commands and queries are "},
        "chunk-3": {"type": "leaf", "data": "separate models."},
    }

    parser = ContentParser(MockDB(docs))

    result = parser.get_markdown_content(parent)

    assert result == "---\ntitle: CQRS\n---\nCommands and queries are separate models."


def test_get_markdown_content_uses_inline_data():
    parent = {"_id": "posts/tiny.md", "type": "plain", "data": "inline body"}

    parser = ContentParser(MockDB({}))

    assert parser.get_markdown_content(parent) == "inline body"


def test_get_binary_content_decodes_base64_chunks():
    parent = {
        "_id": "posts/cqrs/hero.png",
        "type": "newnote",
        "children": ["img-1", "img-2"],
    }
    docs = {
        "img-1": {"type": "leaf", "data": base64.b64encode(b"\x89PNG").decode()},
        "img-2": {"type": "leaf", "data": base64.b64encode(b"\x0d\x0aEND").decode()},
    }

    parser = ContentParser(MockDB(docs))

    assert parser.get_binary_content(parent) == b"\x89PNG\x0d\x0aEND"


def test_get_markdown_content_skips_missing_children():
    parent = {
        "_id": "posts/partial/index.md",
        "type": "plain",
        "children": ["chunk-1", "missing-child", "chunk-2"],
    }
    docs = {
        "chunk-1": {"type": "leaf", "data": "alpha "},
        "chunk-2": {"type": "leaf", "data": "omega"},
    }

    parser = ContentParser(MockDB(docs))

    assert parser.get_markdown_content(parent) == "alpha omega"


def test_get_markdown_content_returns_empty_when_no_children():
    parent = {"_id": "posts/empty.md", "type": "plain", "children": []}

    parser = ContentParser(MockDB({}))

    assert parser.get_markdown_content(parent) == ""


def test_get_binary_content_skips_bad_base64_chunk():
    parent = {"_id": "posts/x/partial.png", "type": "newnote", "children": ["good", "bad"]}
    docs = {
        "good": {"type": "leaf", "data": base64.b64encode(b"OK").decode()},
        "bad": {"type": "leaf", "data": "!!not-base64!!"},
    }
    parser = ContentParser(MockDB(docs))

    assert parser.get_binary_content(parent) == b"OK"


def test_get_markdown_content_propagates_unexpected_errors():
    class ErrorDB(MockDB):
        def get(self, doc_id: str) -> dict:
            if doc_id == "boom":
                raise RuntimeError("connection reset")
            return super().get(doc_id)

    parent = {"_id": "posts/errors.md", "type": "plain", "children": ["ok", "boom"]}
    parser = ContentParser(ErrorDB({"ok": {"type": "leaf", "data": "first "}}))

    with pytest.raises(RuntimeError):
        parser.get_markdown_content(parent)


def test_get_markdown_content_decodes_bytes_leaf():
    parent = {"_id": "posts/bytes.md", "type": "plain", "children": ["b1"]}
    docs = {"b1": {"type": "leaf", "data": b"hello \xffworld"}}
    parser = ContentParser(MockDB(docs))

    assert parser.get_markdown_content(parent) == "hello world"  # \xff is dropped


def test_get_markdown_content_decodes_bytes_from_raw():
    parser = ContentParser(MockDB({}))
    with patch.object(parser, "_get_raw_content", return_value=b"hi \xffthere"):
        result = parser.get_markdown_content({})
    assert result == "hi there"


def test_get_markdown_ignores_non_leaf_child():
    parent = {"_id": "posts/meta.md", "type": "plain", "children": ["meta", "leaf"]}
    docs = {
        "meta": {"type": "meta", "info": "skip me"},
        "leaf": {"type": "leaf", "data": "kept"},
    }
    parser = ContentParser(MockDB(docs))
    assert parser.get_markdown_content(parent) == "kept"
