import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from peervid.api import video
from peervid.core.config import get_settings
from peervid.core.database import Base, engine

settings = get_settings()


def setup_logging():
    handlers = [logging.StreamHandler()]
    if settings.log_file:
        os.makedirs(os.path.dirname(settings.log_file) or ".", exist_ok=True)
        handlers.insert(0, logging.FileHandler(settings.log_file, mode='a'))

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=handlers
    )

    for name in ("uvicorn", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers = logging.getLogger().handlers
        uvicorn_logger.setLevel(settings.log_level)


def storage_mounts():
    """(url prefix, directory, mount name) for every artifact directory served statically."""
    return [
        (settings.static_path_torrents, settings.torrents_dir, "torrents"),
        (settings.static_path_webseed, settings.videos_dir, "webseed"),
        (settings.static_path_thumbnails, settings.thumbnails_dir, "thumbnails"),
        (settings.static_path_previews, settings.previews_dir, "previews"),
    ]


# For creating tables and storage directories if they don't exist
@asynccontextmanager
async def lifespan(app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger = logging.getLogger(__name__)
    logger.info(f"Application started as {settings.url}")

    yield

    logger.info("Application shutting down")
    await engine.dispose()


setup_logging()

app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Length", "Content-Range"],
)

app.include_router(video.router)

# StaticFiles checks its directory when mounted, so create them up front
for prefix, directory, name in storage_mounts():
    os.makedirs(directory, exist_ok=True)
    app.mount(prefix, StaticFiles(directory=directory), name=name)
