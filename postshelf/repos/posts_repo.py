import logging
from pathlib import Path, PurePosixPath
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from postshelf.errors import DuplicateSlug

logger = logging.getLogger(__name__)

BUNDLE_INDEX = "index.md"
SECTION_INDEX = "_index.md"
ROOT = PurePosixPath(".")


class PostSource:
    """One markdown document that should become a post."""

    def __init__(self, slug: str, location: str, reader: Callable[[], str]):
        self.slug = slug
        self.location = location
        self._reader = reader

    def read_text(self) -> str:
        return self._reader()

    def __repr__(self) -> str:
        return f"PostSource(slug={self.slug!r}, location={self.location!r})"


def derive_slugs(paths: Iterable[PurePosixPath]) -> List[Tuple[str, PurePosixPath]]:
    """
    Map markdown paths (relative to the content root) to post slugs.

    ``<slug>/index.md`` is a bundle and takes its directory name; a loose
    ``<slug>.md`` takes its stem. ``_index.md`` section pages, hidden
    folders, and markdown files living inside a bundle are not posts.
    """
    candidates = sorted(
        p
        for p in paths
        if p.suffix == ".md" and not any(part.startswith(".") for part in p.parts)
    )
    bundle_dirs = {
        p.parent for p in candidates if p.name == BUNDLE_INDEX and p.parent != ROOT
    }

    result = []
    for path in candidates:
        if path.name == SECTION_INDEX:
            continue
        if path.name == BUNDLE_INDEX:
            if path.parent == ROOT:
                logger.debug("Skipping index.md at the content root")
                continue
            result.append((path.parent.name, path))
            continue
        if any(parent in bundle_dirs for parent in path.parents):
            continue  # bundle resource
        result.append((path.stem, path))
    return result


def find_duplicates(sources: Iterable[PostSource]) -> Dict[str, List[str]]:
    locations: Dict[str, List[str]] = {}
    for source in sources:
        locations.setdefault(source.slug, []).append(source.location)
    return {slug: locs for slug, locs in locations.items() if len(locs) > 1}


def ensure_unique(sources: List[PostSource]) -> List[PostSource]:
    """Raise DuplicateSlug for the first slug claimed by more than one source."""
    duplicates = find_duplicates(sources)
    if duplicates:
        slug = sorted(duplicates)[0]
        raise DuplicateSlug(slug, duplicates[slug])
    return sources


def select_source(sources: List[PostSource], slug: str) -> Optional[PostSource]:
    matches = [s for s in sources if s.slug == slug]
    if len(matches) > 1:
        raise DuplicateSlug(slug, [s.location for s in matches])
    return matches[0] if matches else None


def is_safe_asset_name(name: str) -> bool:
    path = PurePosixPath(name)
    return bool(name) and not path.is_absolute() and ".." not in path.parts


class FilesystemPostsRepo:
    """Posts stored as a directory tree, one post per directory."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def list_sources(self) -> List[PostSource]:
        if not self.root.is_dir():
            logger.warning(f"Content directory {self.root} does not exist")
            return []

        relative = [
            PurePosixPath(p.relative_to(self.root).as_posix())
            for p in self.root.rglob("*.md")
            if p.is_file()
        ]
        return [
            self._make_source(slug, self.root / Path(rel))
            for slug, rel in derive_slugs(relative)
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

        base = Path(source.location).parent.resolve()
        target = (base / name).resolve()
        if not target.is_relative_to(base) or not target.is_file():
            return None
        return target.read_bytes()

    @staticmethod
    def _make_source(slug: str, path: Path) -> PostSource:
        return PostSource(
            slug=slug,
            location=str(path),
            reader=lambda: path.read_text(encoding="utf-8"),
        )
