import pycouchdb

from postshelf.repos.couch_posts_repo import CouchPostsRepo
from postshelf.repos.posts_repo import FilesystemPostsRepo
from postshelf.services.content_parser import ContentParser
from postshelf.services.posts_service import PostsService
from postshelf.settings import settings


def get_couch_repo() -> CouchPostsRepo:
    """Open the LiveSync vault. Called per request, never at import time."""
    database = pycouchdb.Server(settings.couchdb_url).database(settings.COUCHDB_DATABASE)
    return CouchPostsRepo(database, ContentParser(database), prefix=settings.COUCHDB_PREFIX)


def get_posts_repo():
    backend = settings.CONTENT_BACKEND.lower()
    if backend == "filesystem":
        return FilesystemPostsRepo(settings.content_path)
    if backend == "couchdb":
        return get_couch_repo()
    raise ValueError(f"Unknown CONTENT_BACKEND: {settings.CONTENT_BACKEND!r}")


def get_posts_service():
    return PostsService(repo=get_posts_repo())
