import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from peervid.core.errors import DeletionError
from peervid.models.video import Video
from peervid.schemas.video import RemoteVideoCreateSchema
from peervid.services.artifacts import create_artifacts, delete_artifacts
from peervid.services.serializer import video_from_peer_payload

logger = logging.getLogger(__name__)


async def get_video(db: AsyncSession, video_id: str) -> Video | None:
    result = await db.execute(select(Video).where(Video.id == video_id))
    return result.scalars().first()


async def list_owned(db: AsyncSession) -> list[Video]:
    result = await db.execute(select(Video).where(Video.remote_id.is_(None)))
    return result.scalars().all()


async def list_remotes(db: AsyncSession) -> list[Video]:
    result = await db.execute(select(Video).where(Video.remote_id.is_not(None)))
    return result.scalars().all()


async def list_by_url(db: AsyncSession, pod_url: str) -> list[Video]:
    result = await db.execute(select(Video).where(Video.pod_url == pod_url))
    return result.scalars().all()


async def list_owned_by_author(db: AsyncSession, author: str) -> list[Video]:
    result = await db.execute(
        select(Video).where(Video.remote_id.is_(None), Video.author == author)
    )
    return result.scalars().all()


async def list_by_url_and_remote_id(db: AsyncSession, pod_url: str, remote_id: str) -> list[Video]:
    result = await db.execute(
        select(Video).where(Video.pod_url == pod_url, Video.remote_id == remote_id)
    )
    return result.scalars().all()


async def _persist(db: AsyncSession, video: Video) -> Video:
    """Commit a video whose artifacts already exist. On failure the artifacts are removed again."""
    db.add(video)
    try:
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        try:
            await delete_artifacts(video)
        except DeletionError as e:
            logger.error(f"Could not discard the artifacts of unsaved video {video.id}: {e}")
        raise
    await db.refresh(video)
    return video


async def create_video(db: AsyncSession, video: Video, source_path: str | None = None) -> Video:
    """Generate the artifacts of an owned video, then persist it.

    Nothing is added to the session if artifact generation fails, and a failed
    commit removes the generated artifacts along with the source.
    """
    await create_artifacts(video, source_path)
    video = await _persist(db, video)
    logger.info(f"Video {video.id} created")
    return video


async def create_remote_video(db: AsyncSession, payload: RemoteVideoCreateSchema) -> Video:
    """Mirror a video announced by a peer. Returns the existing record if it was already imported."""
    existing = await list_by_url_and_remote_id(db, payload.pod_url, payload.remote_id)
    if existing:
        logger.info(f"Remote video {payload.remote_id} from {payload.pod_url} already imported")
        return existing[0]

    video = video_from_peer_payload(payload)
    await create_artifacts(video, thumbnail_base64=payload.thumbnail_base64)
    video = await _persist(db, video)
    logger.info(f"Remote video {payload.remote_id} from {payload.pod_url} stored as {video.id}")
    return video


async def delete_video(db: AsyncSession, video: Video) -> None:
    """Remove the artifacts of a video, then its record."""
    await delete_artifacts(video)
    await db.delete(video)
    await db.commit()
    logger.info(f"Video {video.id} deleted")
