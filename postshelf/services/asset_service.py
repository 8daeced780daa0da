import logging
from typing import Optional, Tuple

logger = logging.getLogger(__name__)


def get_asset(repo, slug: str, name: str) -> Tuple[Optional[bytes], Optional[str]]:
    """
    Read a file that lives next to a post (its hero image, usually)
    """
    data = repo.read_asset(slug, name)
    if not data:
        logger.warning(f"No asset data found for: {slug}/{name}")
        return None, None
    return data, get_content_type_from_filename(name)


def get_content_type_from_filename(filename: str) -> str:
    """
    Determine content type from file extension
    """
    filename = filename.lower()
    if filename.endswith((".jpg", ".jpeg")):
        return "image/jpeg"
    elif filename.endswith(".png"):
        return "image/png"
    elif filename.endswith(".gif"):
        return "image/gif"
    elif filename.endswith(".svg"):
        return "image/svg+xml"
    elif filename.endswith(".webp"):
        return "image/webp"
    elif filename.endswith(".avif"):
        return "image/avif"
    else:
        return "application/octet-stream"
