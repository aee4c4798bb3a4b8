import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from peervid.core.config import get_settings

NAME_LENGTH = (3, 50)
DESCRIPTION_LENGTH = (3, 250)
AUTHOR_LENGTH = (3, 20)
DURATION_RANGE = (1, 7200)
TAGS_COUNT = (1, 3)
TAG_LENGTH = (2, 10)
THUMBNAIL64_MAX_LENGTH = 20000

_HOST_RE = re.compile(r"^[A-Za-z0-9.-]+(:\d{1,5})?$")
# Hex SHA-1 or its base32 form, the two encodings a magnet xt accepts
_INFO_HASH_RE = re.compile(r"^([0-9a-fA-F]{40}|[A-Za-z2-7]{32})$")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MagnetSchema(CamelModel):
    info_hash: str


class ClientVideo(CamelModel):
    """Video as returned to API clients."""

    id: str
    name: str
    description: str | None
    pod_url: str | None
    is_local: bool
    magnet_uri: str
    author: str
    duration: int
    tags: list[str]
    thumbnail_path: str
    created_date: datetime


class PeerVideoPayload(CamelModel):
    """Owned video as sent to a federation peer."""

    name: str
    description: str | None
    magnet: MagnetSchema
    remote_id: str
    author: str
    duration: int
    thumbnail_base64: str
    tags: list[str]
    created_date: datetime
    pod_url: str
    extname: str = ".mp4"


def _check_tags(tags: list[str]) -> list[str]:
    if not TAGS_COUNT[0] <= len(tags) <= TAGS_COUNT[1]:
        raise ValueError(f"expected {TAGS_COUNT[0]} to {TAGS_COUNT[1]} tags")
    for tag in tags:
        if not TAG_LENGTH[0] <= len(tag) <= TAG_LENGTH[1]:
            raise ValueError(f"tag '{tag}' must be {TAG_LENGTH[0]} to {TAG_LENGTH[1]} characters")
    return tags


def _check_extname(extname: str) -> str:
    allowed = get_settings().video_extensions
    if extname not in allowed:
        raise ValueError(f"extension {extname} not allowed. Accepted: {', '.join(allowed)}")
    return extname


class VideoCreateSchema(BaseModel):
    """Metadata accepted for a new owned video."""

    name: str = Field(..., min_length=NAME_LENGTH[0], max_length=NAME_LENGTH[1], examples=["Sample Video"])
    description: str = Field(..., min_length=DESCRIPTION_LENGTH[0], max_length=DESCRIPTION_LENGTH[1])
    author: str = Field(..., min_length=AUTHOR_LENGTH[0], max_length=AUTHOR_LENGTH[1])
    tags: list[str]
    extname: str = Field(..., examples=[".mp4"])

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, value: list[str]) -> list[str]:
        return _check_tags(value)

    @field_validator("extname")
    @classmethod
    def validate_extname(cls, value: str) -> str:
        return _check_extname(value)


class RemoteVideoCreateSchema(PeerVideoPayload):
    """Peer payload as validated before a remote video is created from it."""

    name: str = Field(..., min_length=NAME_LENGTH[0], max_length=NAME_LENGTH[1])
    description: str = Field(..., min_length=DESCRIPTION_LENGTH[0], max_length=DESCRIPTION_LENGTH[1])
    remote_id: str = Field(..., min_length=1, max_length=64)
    author: str = Field(..., min_length=AUTHOR_LENGTH[0], max_length=AUTHOR_LENGTH[1])
    duration: int = Field(..., ge=DURATION_RANGE[0], le=DURATION_RANGE[1])
    thumbnail_base64: str = Field(..., min_length=1, max_length=THUMBNAIL64_MAX_LENGTH)

    @field_validator("magnet")
    @classmethod
    def validate_magnet(cls, value: MagnetSchema) -> MagnetSchema:
        if not _INFO_HASH_RE.match(value.info_hash):
            raise ValueError("infoHash must be 40 hex or 32 base32 characters")
        return value

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, value: list[str]) -> list[str]:
        return _check_tags(value)

    @field_validator("extname")
    @classmethod
    def validate_extname(cls, value: str) -> str:
        return _check_extname(value)

    @field_validator("pod_url")
    @classmethod
    def validate_pod_url(cls, value: str) -> str:
        if not _HOST_RE.match(value):
            raise ValueError("podUrl must be host[:port]")
        return value
