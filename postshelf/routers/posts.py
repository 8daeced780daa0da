import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from postshelf import dependencies as deps
from postshelf.errors import DuplicateSlug, MalformedFrontMatter, NotFound
from postshelf.schemas.blog import PostDetail, PostSummary, ViolationReport
from postshelf.services.posts_service import PostsService, to_detail, to_summary
from postshelf.settings import settings

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/posts", response_model=List[PostSummary])
def list_posts(
    include_drafts: bool = False,
    service: PostsService = Depends(deps.get_posts_service),
):
    """Get metadata for every post, newest first."""
    try:
        listing = service.list_posts(include_drafts=include_drafts)
        posts = [to_summary(post, settings.API_URL) for post in listing]
        if listing.violations:
            logger.warning(
                f"{len(listing.violations)} post(s) left out of the listing: "
                + ", ".join(sorted(listing.violations))
            )
        return posts
    except DuplicateSlug as e:
        logger.error(str(e))
        raise HTTPException(status_code=409, detail=str(e))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error listing posts: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve posts")


@router.get("/posts/{slug}", response_model=PostDetail)
def get_post(
    slug: str,
    include_drafts: bool = False,
    service: PostsService = Depends(deps.get_posts_service),
):
    """Get a single post by slug."""
    try:
        post = service.get_post(slug)
        if post.draft and not include_drafts:
            raise HTTPException(status_code=404, detail="Post not found")
        return to_detail(post, settings.API_URL)
    except NotFound:
        raise HTTPException(status_code=404, detail="Post not found")
    except DuplicateSlug as e:
        raise HTTPException(status_code=409, detail=str(e))
    except MalformedFrontMatter as e:
        raise HTTPException(
            status_code=422,
            detail=[v.model_dump() for v in e.violations],
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error retrieving post {slug}: {e}")
        raise HTTPException(status_code=500, detail="Failed to retrieve post")


@router.get("/posts/{slug}/violations", response_model=ViolationReport)
def get_post_violations(
    slug: str,
    service: PostsService = Depends(deps.get_posts_service),
):
    """Validate a single post without failing on bad front-matter."""
    try:
        violations = service.check_post(slug)
        return ViolationReport(slug=slug, valid=not violations, violations=violations)
    except NotFound:
        raise HTTPException(status_code=404, detail="Post not found")
    except DuplicateSlug as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        logger.error(f"Unexpected error validating post {slug}: {e}")
        raise HTTPException(status_code=500, detail="Failed to validate post")
