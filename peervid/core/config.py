"""Instance configuration read from the environment (and an optional .env file)."""

import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

load_dotenv()

# Remote videos are always addressed through these prefixes
REMOTE_SCHEME_HTTP = "http"
REMOTE_SCHEME_WS = "ws"

DELETION_POLICIES = ("fail_fast", "best_effort")


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: str) -> tuple[str, ...]:
    raw = os.getenv(name, default)
    return tuple(item.strip() for item in raw.split(",") if item.strip())


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    database_url: str = "sqlite+aiosqlite:///./peervid.db"

    videos_dir: str = "storage/videos"
    thumbnails_dir: str = "storage/thumbnails"
    previews_dir: str = "storage/previews"
    torrents_dir: str = "storage/torrents"

    https: bool = False
    hostname: str = "localhost"
    port: int = 9000

    static_path_torrents: str = "/static/torrents"
    static_path_webseed: str = "/static/webseed"
    static_path_thumbnails: str = "/static/thumbnails"
    static_path_previews: str = "/static/previews"

    thumbnail_size: str = "200x110"
    video_extensions: tuple[str, ...] = (".mp4", ".webm", ".ogv")

    deletion_policy: str = "fail_fast"
    cleanup_on_failure: bool = False

    log_file: str = "logs/main.log"
    log_level: str = "INFO"

    @property
    def scheme(self) -> str:
        return "https" if self.https else "http"

    @property
    def ws_scheme(self) -> str:
        return "wss" if self.https else "ws"

    @property
    def host(self) -> str:
        """hostname:port, the value stored as podUrl on owned videos."""
        return f"{self.hostname}:{self.port}"

    @property
    def url(self) -> str:
        return f"{self.scheme}://{self.host}"

    @property
    def ws_url(self) -> str:
        return f"{self.ws_scheme}://{self.host}"

    @property
    def fail_fast_deletion(self) -> bool:
        return self.deletion_policy == "fail_fast"


def load_settings() -> Settings:
    """Build settings from environment variables, falling back to defaults."""
    deletion_policy = os.getenv("ARTIFACT_DELETION_POLICY", "fail_fast").strip().lower()
    if deletion_policy not in DELETION_POLICIES:
        raise RuntimeError(
            f"ARTIFACT_DELETION_POLICY must be one of {', '.join(DELETION_POLICIES)}, got '{deletion_policy}'"
        )

    return Settings(
        database_url=os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./peervid.db"),
        videos_dir=os.getenv("STORAGE_VIDEOS_DIR", "storage/videos"),
        thumbnails_dir=os.getenv("STORAGE_THUMBNAILS_DIR", "storage/thumbnails"),
        previews_dir=os.getenv("STORAGE_PREVIEWS_DIR", "storage/previews"),
        torrents_dir=os.getenv("STORAGE_TORRENTS_DIR", "storage/torrents"),
        https=_env_bool("WEBSERVER_HTTPS"),
        hostname=os.getenv("WEBSERVER_HOSTNAME", "localhost"),
        port=int(os.getenv("WEBSERVER_PORT", "9000")),
        static_path_torrents=os.getenv("STATIC_PATH_TORRENTS", "/static/torrents"),
        static_path_webseed=os.getenv("STATIC_PATH_WEBSEED", "/static/webseed"),
        static_path_thumbnails=os.getenv("STATIC_PATH_THUMBNAILS", "/static/thumbnails"),
        static_path_previews=os.getenv("STATIC_PATH_PREVIEWS", "/static/previews"),
        thumbnail_size=os.getenv("THUMBNAIL_SIZE", "200x110"),
        video_extensions=_env_list("VIDEO_EXTENSIONS", ".mp4,.webm,.ogv"),
        deletion_policy=deletion_policy,
        cleanup_on_failure=_env_bool("ARTIFACT_CLEANUP_ON_FAILURE"),
        log_file=os.getenv("LOG_FILE", "logs/main.log"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
