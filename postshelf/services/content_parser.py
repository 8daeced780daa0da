import base64
import binascii
import logging

import pycouchdb

logger = logging.getLogger(__name__)


class ContentParser:
    """Reassembles Obsidian LiveSync documents from their leaf chunks."""

    def __init__(self, db):
        self.db = db

    def get_markdown_content(self, doc: dict) -> str:
        """Get the full markdown content from a document (decoded as text)."""
        raw = self._get_raw_content(doc, is_binary=False)
        if isinstance(raw, bytes):
            # If somehow bytes slipped in, decode to string
            return raw.decode("utf-8", errors="ignore")
        return raw or ""

    def get_binary_content(self, doc: dict) -> bytes | None:
        """Get binary content from a document (decode base64 chunks)."""
        return self._get_raw_content(doc, is_binary=True)

    def _get_raw_content(
        self, doc: dict, is_binary: bool = False
    ) -> str | bytes | None:
        # Small notes may be stored inline instead of chunked
        if not is_binary and isinstance(doc.get("data"), str) and not doc.get("children"):
            return doc["data"]

        children = doc.get("children")
        if not children:
            return None

        parts = []
        for c in children:
            try:
                child_doc = self.db.get(c)
            except pycouchdb.exceptions.NotFound:
                logger.warning(f"Missing chunk {c} for {doc.get('_id')}")
                continue

            if child_doc.get("type") != "leaf" or "data" not in child_doc:
                continue
            data = child_doc["data"]
            if is_binary:
                try:
                    parts.append(base64.b64decode(data, validate=True))
                except (binascii.Error, ValueError):
                    logger.warning(f"Failed to decode base64 chunk {c}, skipping")
            elif isinstance(data, bytes):
                parts.append(data.decode("utf-8", errors="ignore"))
            else:
                parts.append(data)

        if is_binary:
            return b"".join(parts) if parts else None
        return "".join(parts) if parts else None
