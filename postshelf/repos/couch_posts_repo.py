import logging
import urllib.parse
from pathlib import PurePosixPath
from typing import List, Optional

import pycouchdb

from postshelf.repos.posts_repo import (
    PostSource,
    derive_slugs,
    is_safe_asset_name,
    select_source,
)

logger = logging.getLogger(__name__)


class CouchPostsRepo:
    """Posts synced from an Obsidian vault into CouchDB by LiveSync."""

    def __init__(self, couch_db, parser, prefix: str = "posts/"):
        self.db = couch_db
        self.parser = parser
        self.prefix = prefix if prefix.endswith("/") else f"{prefix}/"

    def list_docs(self) -> List[dict]:
        all_docs = [row.get("doc", row) for row in self.db.all(include_docs=True)]
        return [doc for doc in all_docs if self._is_valid(doc, self.prefix)]

    def list_sources(self) -> List[PostSource]:
        docs_by_path = {}
        for doc in self.list_docs():
            path = doc.get("path", doc.get("_id", ""))
            if doc.get("type") == "plain" and path.endswith(".md"):
                docs_by_path[PurePosixPath(path.removeprefix(self.prefix))] = doc

        return [
            self._make_source(slug, docs_by_path[rel])
            for slug, rel in derive_slugs(docs_by_path)
        ]

    def get_source(self, slug: str) -> Optional[PostSource]:
        return select_source(self.list_sources(), slug)

    def read_asset(self, slug: str, name: str) -> Optional[bytes]:
        if not is_safe_asset_name(name):
            logger.warning(f"Refusing asset path {name!r} for post {slug}")
            return None
        source = self.get_source(slug)
        if source is None:
            return None

        asset_path = str(PurePosixPath(source.location).parent / name)
        doc = self._get_doc(asset_path)
        if not self._is_valid(doc, self.prefix):
            return None

        data = self.parser.get_binary_content(doc)
        if not data:
            logger.warning(f"No asset data found for: {asset_path}")
            return None

        expected_size = doc.get("size")
        if expected_size and len(data) != expected_size:
            logger.warning(
                f"Asset size mismatch for {asset_path}. Expected: {expected_size}, Got: {len(data)}"
            )
            return None
        return data

    def _get_doc(self, doc_id: str) -> Optional[dict]:
        try:
            return self.db.get(doc_id)
        except pycouchdb.exceptions.NotFound:
            pass
        try:
            return self.db.get(urllib.parse.quote(doc_id, safe=""))
        except pycouchdb.exceptions.NotFound:
            logger.info(f"Asset not found in CouchDB: {doc_id}")
            return None

    def _make_source(self, slug: str, doc: dict) -> PostSource:
        return PostSource(
            slug=slug,
            location=doc.get("path", doc.get("_id", "")),
            reader=lambda: self.parser.get_markdown_content(doc),
        )

    @staticmethod
    def _is_valid(doc: dict | None, prefix: str) -> bool:
        if not doc:
            return False
        path = doc.get("path", doc.get("_id", ""))
        return (
            doc.get("type") != "leaf"
            and path.startswith(prefix)
            and not doc.get("deleted", False)
        )
