import logging
import os
import shutil

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from peervid.core.config import get_settings
from peervid.core.database import get_db
from peervid.core.errors import ArtifactGenerationError, ArtifactReadError, DeletionError
from peervid.crud.video import create_remote_video, create_video, delete_video, get_video
from peervid.models.video import Video
from peervid.schemas.video import ClientVideo, PeerVideoPayload, RemoteVideoCreateSchema, VideoCreateSchema
from peervid.services.artifacts import run_blocking
from peervid.services.serializer import to_client_json, to_peer_export
from peervid.utils.ffmpeg_util import get_duration_from_file
from peervid.utils.storage import remove_artifact

router = APIRouter(tags=["videos"])

logger = logging.getLogger(__name__)


async def _load_or_404(db: AsyncSession, video_id: str) -> Video:
    video = await get_video(db, video_id)
    if not video:
        raise HTTPException(status_code=404, detail="Video not found")
    return video


@router.post("/videos", response_model=ClientVideo, response_model_by_alias=True, status_code=201)
async def upload_video(
    file: UploadFile = File(...),
    name: str = Form(...),
    description: str = Form(...),
    author: str = Form(...),
    tags: list[str] = Form(...),
    db: AsyncSession = Depends(get_db),
):
    """Upload a new video and generate its torrent, thumbnail and preview."""
    settings = get_settings()
    extname = os.path.splitext(file.filename or "")[1].lower()

    try:
        metadata = VideoCreateSchema(name=name, description=description, author=author, tags=tags, extname=extname)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.errors(include_url=False, include_context=False))

    video = Video(**metadata.model_dump())
    os.makedirs(settings.videos_dir, exist_ok=True)
    source_path = os.path.join(settings.videos_dir, video.get_video_filename())

    with open(source_path, "wb") as out:
        await run_blocking(shutil.copyfileobj, file.file, out)

    try:
        video.duration = await run_blocking(get_duration_from_file, source_path)
        video = await create_video(db, video, source_path)
    except (RuntimeError, ArtifactGenerationError) as e:
        logger.error(f"Failed to create video {video.id}: {e}")
        await run_blocking(remove_artifact, settings.videos_dir, video.get_video_filename())
        raise HTTPException(status_code=500, detail=f"Failed to create video: {e}")
    except SQLAlchemyError as e:
        logger.error(f"Failed to store video {video.id}: {e}")
        await run_blocking(remove_artifact, settings.videos_dir, video.get_video_filename())
        raise HTTPException(status_code=500, detail="Failed to store video")

    return to_client_json(video, settings)


@router.get("/videos/{video_id}", response_model=ClientVideo, response_model_by_alias=True)
async def read_video(video_id: str, db: AsyncSession = Depends(get_db)):
    video = await _load_or_404(db, video_id)
    return to_client_json(video)


@router.get("/videos/{video_id}/remote", response_model=PeerVideoPayload, response_model_by_alias=True)
async def export_video(video_id: str, db: AsyncSession = Depends(get_db)):
    """Payload a federation peer uses to mirror this video."""
    video = await _load_or_404(db, video_id)
    if not video.is_owned():
        raise HTTPException(status_code=400, detail="Only videos owned by this instance can be exported")

    try:
        return await run_blocking(to_peer_export, video)
    except ArtifactReadError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/remote/videos", response_model=ClientVideo, response_model_by_alias=True, status_code=201)
async def import_remote_video(payload: RemoteVideoCreateSchema, db: AsyncSession = Depends(get_db)):
    try:
        video = await create_remote_video(db, payload)
    except ArtifactGenerationError as e:
        raise HTTPException(status_code=500, detail=f"Failed to import remote video: {e}")
    except SQLAlchemyError as e:
        logger.error(f"Failed to store remote video {payload.remote_id} from {payload.pod_url}: {e}")
        raise HTTPException(status_code=500, detail="Failed to store remote video")
    return to_client_json(video)


@router.delete("/videos/{video_id}", status_code=204)
async def remove_video(video_id: str, db: AsyncSession = Depends(get_db)):
    video = await _load_or_404(db, video_id)
    try:
        await delete_video(db, video)
    except DeletionError as e:
        logger.error(f"Failed to delete video {video_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to delete video: {e}")
