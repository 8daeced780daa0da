import logging
import secrets
from typing import Optional

from fastapi import Depends, HTTPException, Security
from fastapi.security.api_key import APIKeyHeader
from starlette.status import HTTP_403_FORBIDDEN

from postshelf.settings import Settings, settings

logger = logging.getLogger(__name__)

API_KEY_NAME = "X-Postshelf-Key"
api_key_scheme = APIKeyHeader(name=API_KEY_NAME, auto_error=False)


def get_settings() -> Settings:
    """Small wrapper to allow dependency overrides in tests."""
    return settings


def keys_match(given: Optional[str], expected: str) -> bool:
    if not given:
        return False
    return secrets.compare_digest(given.encode("utf-8"), expected.encode("utf-8"))


def get_api_key(
    api_key: Optional[str] = Security(api_key_scheme),
    current_settings: Settings = Depends(get_settings),
) -> Optional[str]:
    """Guard the posts routes with the ``X-Postshelf-Key`` header.

    An empty ``POSTSHELF_API_KEY`` turns the guard off, which is how a
    content directory is previewed locally. Once a key is configured, a
    missing or different header is refused with 403.
    """
    expected = current_settings.POSTSHELF_API_KEY
    if not expected:
        return None
    if keys_match(api_key, expected):
        return api_key
    logger.debug("Refused request with a missing or wrong API key")
    raise HTTPException(
        status_code=HTTP_403_FORBIDDEN,
        detail="Could not validate API key",
    )
