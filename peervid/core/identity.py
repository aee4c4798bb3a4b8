"""Video identity variants and the artifact names derived from them.

A video is either *owned* (uploaded to this instance) or *remote* (mirrored
from a federation peer). Every artifact filename is a pure function of the
variant, so names can be recomputed at any time from persisted fields.

Note the asymmetry: thumbnails are always named after the local id, even for
remote videos, while the video file, preview and torrent of a remote video
are named after the peer's id. Thumbnails therefore share one namespace on
this instance whereas the other names mirror the origin's layout.
"""

from dataclasses import dataclass

THUMBNAIL_EXTENSION = ".jpg"
PREVIEW_EXTENSION = ".jpg"
TORRENT_EXTENSION = ".torrent"


@dataclass(frozen=True)
class OwnedIdentity:
    id: str


@dataclass(frozen=True)
class RemoteIdentity:
    local_id: str
    remote_id: str
    origin_host: str


VideoIdentity = OwnedIdentity | RemoteIdentity


def is_owned(identity: VideoIdentity) -> bool:
    return isinstance(identity, OwnedIdentity)


def local_id(identity: VideoIdentity) -> str:
    if isinstance(identity, OwnedIdentity):
        return identity.id
    return identity.local_id


def naming_key(identity: VideoIdentity) -> str:
    """Id used for the video file, preview and torrent names."""
    if isinstance(identity, OwnedIdentity):
        return identity.id
    return identity.remote_id


def video_filename(identity: VideoIdentity, extname: str) -> str:
    return naming_key(identity) + extname


def thumbnail_name(identity: VideoIdentity) -> str:
    return local_id(identity) + THUMBNAIL_EXTENSION


def preview_name(identity: VideoIdentity) -> str:
    return naming_key(identity) + PREVIEW_EXTENSION


def torrent_name(identity: VideoIdentity) -> str:
    return naming_key(identity) + TORRENT_EXTENSION
