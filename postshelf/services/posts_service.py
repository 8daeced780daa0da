import datetime
import logging
import urllib.parse
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, Iterator, List, NamedTuple, Optional
from zoneinfo import ZoneInfo

from postshelf.errors import MalformedFrontMatter, NotFound
from postshelf.repos.posts_repo import PostSource, ensure_unique
from postshelf.schemas.blog import PostDetail, PostSummary
from postshelf.schemas.post import Post, Violation
from postshelf.services.front_matter import calculate_reading_time, parse_post
from postshelf.services.validation import is_url, validate_post
from postshelf.settings import settings

logger = logging.getLogger(__name__)


class LoadedPost(NamedTuple):
    slug: str
    post: Optional[Post]
    violations: List[Violation]

    @property
    def ok(self) -> bool:
        return self.post is not None and not self.violations


class PostListing:
    """
    Re-iterable view over the published posts, newest first.

    Nothing is read until iteration starts, and every iteration rescans the
    source. ``violations`` holds what the latest scan rejected, keyed by slug.
    """

    def __init__(self, service: "PostsService", include_drafts: bool):
        self._service = service
        self.include_drafts = include_drafts
        self.violations: Dict[str, List[Violation]] = {}

    def __iter__(self) -> Iterator[Post]:
        loaded = self._service.load_all()
        self.violations = {
            item.slug: item.violations for item in loaded if item.violations
        }
        posts = [
            item.post
            for item in loaded
            if item.ok and (self.include_drafts or not item.post.draft)
        ]
        yield from sort_posts(posts)


class PostsService:
    def __init__(
        self,
        repo,
        workers: Optional[int] = None,
        default_tz: Optional[datetime.tzinfo] = None,
    ):
        self.repo = repo
        self.workers = workers if workers is not None else settings.SCAN_WORKERS
        self.default_tz = default_tz or ZoneInfo(settings.DEFAULT_TIMEZONE)

    def list_posts(self, include_drafts: bool = False) -> PostListing:
        return PostListing(self, include_drafts)

    def get_post(self, slug: str) -> Post:
        source = self.repo.get_source(slug)
        if source is None:
            raise NotFound(slug)
        loaded = self._load(source)
        if not loaded.ok:
            raise MalformedFrontMatter(slug, loaded.violations)
        return loaded.post

    def validate(self, post: Post) -> List[Violation]:
        return validate_post(post)

    def check_post(self, slug: str) -> List[Violation]:
        source = self.repo.get_source(slug)
        if source is None:
            raise NotFound(slug)
        return self._load(source).violations

    def check_all(self) -> Dict[str, List[Violation]]:
        return {item.slug: item.violations for item in self.load_all()}

    def load_all(self) -> List[LoadedPost]:
        sources = ensure_unique(self.repo.list_sources())
        if self.workers > 1 and len(sources) > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as pool:
                return list(pool.map(self._load, sources))
        return [self._load(source) for source in sources]

    def _load(self, source: PostSource) -> LoadedPost:
        try:
            text = source.read_text()
        except UnicodeDecodeError as e:
            logger.warning(f"Skipping post {source.slug} ({source.location}): {e}")
            violation = Violation(
                slug=source.slug,
                field=None,
                message=f"post is not valid UTF-8 text ({e.reason} at byte {e.start})",
            )
            return LoadedPost(source.slug, None, [violation])

        post, violations = parse_post(text, source.slug, default_tz=self.default_tz)
        if post is not None:
            violations = violations + validate_post(post)
        if violations:
            logger.warning(
                f"Skipping post {source.slug} ({source.location}): "
                + "; ".join(v.message for v in violations)
            )
        return LoadedPost(source.slug, post, violations)


def sort_posts(posts: Iterable[Post]) -> List[Post]:
    """Newest first; equal dates fall back to slug order."""
    by_slug = sorted(posts, key=lambda p: p.slug)
    return sorted(by_slug, key=lambda p: p.date, reverse=True)


def hero_url(post: Post, api_url: str) -> Optional[str]:
    if not post.hero:
        return None
    if is_url(post.hero):
        return post.hero
    quoted = urllib.parse.quote(post.hero)
    return f"{api_url.rstrip('/')}/assets/{post.slug}/{quoted}"


def to_summary(post: Post, api_url: str) -> PostSummary:
    return PostSummary(
        slug=post.slug,
        title=post.title,
        date=post.date.isoformat(),
        draft=post.draft,
        hero=post.hero,
        heroUrl=hero_url(post, api_url),
        description=post.description,
        tags=post.tags,
        categories=post.categories,
        readingTime=calculate_reading_time(post.body),
    )


def to_detail(post: Post, api_url: str) -> PostDetail:
    summary = to_summary(post, api_url)
    return PostDetail(**summary.model_dump(), content=post.body)
