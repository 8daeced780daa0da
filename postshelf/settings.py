from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


def choose_env_file() -> str:
    return ".env.local" if Path(".env.local").exists() else ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=choose_env_file(),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # tolerate unrelated env vars
    )

    # Content source: "filesystem" or "couchdb"
    CONTENT_BACKEND: str = "filesystem"
    CONTENT_DIR: str = "content/posts"

    # CouchDB (Obsidian LiveSync vault)
    COUCHDB_HOST: str = "localhost"
    COUCHDB_PORT: int = 5984
    COUCHDB_USERNAME: str = "admin"
    COUCHDB_PASSWORD: str = ""
    COUCHDB_DATABASE: str = "obsidian_db"
    COUCHDB_PREFIX: str = "posts/"

    # Parsing
    DEFAULT_TIMEZONE: str = "UTC"
    SCAN_WORKERS: int = 1

    # Public URL of this API, used to build asset links
    API_URL: str = "http://localhost:8000"

    # Logging
    LOG_LEVEL: str = "INFO"

    # Our own API Key
    POSTSHELF_API_KEY: str = ""

    @property
    def couchdb_url(self) -> str:
        return f"http://{self.COUCHDB_USERNAME}:{self.COUCHDB_PASSWORD}@{self.COUCHDB_HOST}:{self.COUCHDB_PORT}"

    @property
    def content_path(self) -> Path:
        return Path(self.CONTENT_DIR).expanduser()


# Global settings instance (evaluated at import, but reads env on construction)
settings = Settings()
