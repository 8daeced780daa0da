import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from postshelf import dependencies as deps
from postshelf.errors import DuplicateSlug
from postshelf.services.asset_service import get_asset

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/assets/{slug}/{name:path}")
def get_post_asset(slug: str, name: str, repo=Depends(deps.get_posts_repo)):
    """
    Serve a file from a post's bundle, such as its hero image
    """
    try:
        data, content_type = get_asset(repo, slug, name)
    except DuplicateSlug as e:
        raise HTTPException(status_code=409, detail=str(e))
    except OSError as e:
        logger.error(f"Error reading asset {slug}/{name}: {e}")
        raise HTTPException(status_code=500, detail="Failed to read asset")

    if not data or not content_type:
        raise HTTPException(status_code=404, detail="Asset not found")

    # Set proper content length header
    headers = {
        "Content-Length": str(len(data)),
        "Accept-Ranges": "bytes",
    }

    return Response(content=data, media_type=content_type, headers=headers)
