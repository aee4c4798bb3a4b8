import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Integer, String

from peervid.core import identity as naming
from peervid.core.database import Base


def new_video_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Video(Base):
    __tablename__ = "videos"

    # Local database key. For remote videos it is not used for artifact naming,
    # except for the thumbnail which every instance keeps a copy of.
    id = Column(String(36), primary_key=True, index=True, nullable=False, default=new_video_id)
    remote_id = Column(String(64), index=True, nullable=True)
    pod_url = Column(String, index=True, nullable=True)

    name = Column(String, index=True, nullable=False)
    extname = Column(String(8), nullable=False)
    description = Column(String, nullable=True)
    author = Column(String, index=True, nullable=False)
    duration = Column(Integer, nullable=False, default=0)
    tags = Column(JSON, nullable=False, default=list)
    info_hash = Column(String, nullable=True)
    thumbnail = Column(String, nullable=True)

    created_date = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __init__(self, **kwargs):
        # Artifact names depend on the id, so it must exist before the first flush
        kwargs.setdefault("id", new_video_id())
        kwargs.setdefault("tags", [])
        kwargs.setdefault("created_date", utcnow())
        super().__init__(**kwargs)

    @property
    def identity(self) -> naming.VideoIdentity:
        if self.remote_id is None:
            return naming.OwnedIdentity(id=self.id)
        return naming.RemoteIdentity(local_id=self.id, remote_id=self.remote_id, origin_host=self.pod_url)

    def is_owned(self) -> bool:
        return naming.is_owned(self.identity)

    def get_video_filename(self) -> str:
        return naming.video_filename(self.identity, self.extname)

    def get_thumbnail_name(self) -> str:
        return naming.thumbnail_name(self.identity)

    def get_preview_name(self) -> str:
        return naming.preview_name(self.identity)

    def get_torrent_name(self) -> str:
        return naming.torrent_name(self.identity)

    def __repr__(self):
        return f"<Video(id={self.id}, name={self.name}, remote_id={self.remote_id})>"
