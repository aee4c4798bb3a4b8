"""Shared fixtures. Environment is set before any peervid module reads it."""
import os
import tempfile

_storage_root = tempfile.mkdtemp(prefix="peervid-tests-")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_FILE", "")
for _name in ("videos", "thumbnails", "previews", "torrents"):
    os.environ.setdefault(f"STORAGE_{_name.upper()}_DIR", os.path.join(_storage_root, _name))

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from peervid.core.config import Settings
from peervid.core.database import Base
from peervid.models.video import Video

OWNED_INFO_HASH = "abcdef0123456789abcdef0123456789abcdef01"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        videos_dir=str(tmp_path / "videos"),
        thumbnails_dir=str(tmp_path / "thumbnails"),
        previews_dir=str(tmp_path / "previews"),
        torrents_dir=str(tmp_path / "torrents"),
        hostname="peertube.example",
        port=9000,
    )


@pytest.fixture
def owned_video():
    return Video(
        name="Clip",
        extname=".mp4",
        description="A short clip",
        author="alice",
        duration=10,
        tags=["demo"],
        info_hash=OWNED_INFO_HASH,
        pod_url="peertube.example:9000",
    )


@pytest.fixture
def remote_video():
    return Video(
        remote_id="5f1b2c3d4e5f60718293a4b5",
        pod_url="peer.example:9001",
        name="Remote clip",
        extname=".webm",
        description="Mirrored from a peer",
        author="bob",
        duration=42,
        tags=["peer"],
        info_hash="0123456789abcdef0123456789abcdef01234567",
    )


@pytest.fixture
def source_file(settings, owned_video):
    """Random bytes standing in for the uploaded media of ``owned_video``."""
    os.makedirs(settings.videos_dir, exist_ok=True)
    path = os.path.join(settings.videos_dir, owned_video.get_video_filename())
    with open(path, "wb") as f:
        f.write(os.urandom(96 * 1024))
    return path


def fake_generate_image(video_path, folder, image_name, size=None):
    os.makedirs(folder, exist_ok=True)
    with open(os.path.join(folder, image_name), "wb") as f:
        f.write(b"\xff\xd8thumb" if size else b"\xff\xd8preview")
    return image_name


@pytest_asyncio.fixture
async def db():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()
