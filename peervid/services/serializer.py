"""Projections of a persisted video for API clients and for federation peers."""

import logging

from peervid.core.config import Settings, get_settings
from peervid.core.errors import ArtifactReadError
from peervid.models.video import Video
from peervid.schemas.video import ClientVideo, MagnetSchema, PeerVideoPayload, RemoteVideoCreateSchema
from peervid.utils.magnet import generate_magnet_uri
from peervid.utils.storage import read_base64_file

logger = logging.getLogger(__name__)


def to_client_json(video: Video, settings: Settings | None = None) -> ClientVideo:
    settings = settings or get_settings()
    return ClientVideo(
        id=video.id,
        name=video.name,
        description=video.description,
        pod_url=video.pod_url,
        is_local=video.is_owned(),
        magnet_uri=generate_magnet_uri(video, settings),
        author=video.author,
        duration=video.duration,
        tags=list(video.tags or []),
        thumbnail_path=f"{settings.static_path_thumbnails}/{video.get_thumbnail_name()}",
        created_date=video.created_date,
    )


def to_peer_export(video: Video, settings: Settings | None = None) -> PeerVideoPayload:
    """Bundle an owned video with its base64 thumbnail for transfer to a peer.

    Raises:
        ValueError: If the video is not owned by this instance
        ArtifactReadError: If the thumbnail cannot be read
    """
    settings = settings or get_settings()

    if not video.is_owned():
        raise ValueError(f"Video {video.id} is not owned by this instance and cannot be exported")

    try:
        thumbnail_base64 = read_base64_file(settings.thumbnails_dir, video.get_thumbnail_name())
    except OSError as exc:
        logger.error(f"Cannot read the thumbnail of video {video.id}: {exc}")
        raise ArtifactReadError(
            f"Cannot read the thumbnail of video {video.id}", unit="thumbnail", video_id=video.id
        ) from exc

    return PeerVideoPayload(
        name=video.name,
        description=video.description,
        magnet=MagnetSchema(info_hash=video.info_hash),
        remote_id=video.id,
        author=video.author,
        duration=video.duration,
        thumbnail_base64=thumbnail_base64,
        tags=list(video.tags or []),
        created_date=video.created_date,
        pod_url=video.pod_url,
        extname=video.extname,
    )


def video_from_peer_payload(payload: RemoteVideoCreateSchema) -> Video:
    """Transient remote video for a peer payload. Its thumbnail still has to be
    written with ``create_artifacts(video, thumbnail_base64=payload.thumbnail_base64)``."""
    return Video(
        remote_id=payload.remote_id,
        pod_url=payload.pod_url,
        name=payload.name,
        extname=payload.extname,
        description=payload.description,
        author=payload.author,
        duration=payload.duration,
        tags=list(payload.tags),
        info_hash=payload.magnet.info_hash,
        created_date=payload.created_date,
    )
