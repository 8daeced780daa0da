from fastapi import FastAPI
from fastapi.testclient import TestClient

from postshelf import dependencies as deps
from postshelf.errors import DuplicateSlug
from postshelf.repos.posts_repo import FilesystemPostsRepo
from postshelf.routers import assets
from tests.conftest import write_post


def build_client(repo):
    app = FastAPI()
    app.dependency_overrides[deps.get_posts_repo] = lambda: repo
    app.include_router(assets.router)
    return TestClient(app)


def test_get_asset_serves_bytes_and_headers(tmp_path):
    write_post(tmp_path, "cqrs/index.md", "---\ntitle: CQRS\n---\n")
    (tmp_path / "cqrs" / "hero.png").write_bytes(b"DATA")

    res = build_client(FilesystemPostsRepo(tmp_path)).get("/assets/cqrs/hero.png")

    assert res.status_code == 200
    assert res.content == b"DATA"
    assert res.headers["content-type"] == "image/png"
    assert res.headers["Content-Length"] == "4"
    assert res.headers["Accept-Ranges"] == "bytes"


def test_get_asset_returns_404_when_missing(tmp_path):
    write_post(tmp_path, "cqrs/index.md", "---\ntitle: CQRS\n---\n")

    res = build_client(FilesystemPostsRepo(tmp_path)).get("/assets/cqrs/missing.png")

    assert res.status_code == 404


def test_get_asset_maps_duplicate_slug_to_409():
    class DupRepo:
        def read_asset(self, slug, name):
            raise DuplicateSlug(slug, ["a", "b"])

    res = build_client(DupRepo()).get("/assets/same/hero.png")

    assert res.status_code == 409


def test_get_asset_returns_500_on_read_error():
    class BrokenRepo:
        def read_asset(self, slug, name):
            raise PermissionError("denied")

    res = build_client(BrokenRepo()).get("/assets/cqrs/hero.png")

    assert res.status_code == 500
