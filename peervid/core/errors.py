"""Error kinds raised by the artifact pipeline.

Every error keeps the label of the failing unit (``torrent``, ``thumbnail``,
``preview`` or ``file``) and the id of the video it was working on, and is
raised ``from`` the underlying exception.
"""


class ArtifactError(Exception):
    def __init__(self, message: str, unit: str | None = None, video_id: str | None = None):
        super().__init__(message)
        self.unit = unit
        self.video_id = video_id


class ArtifactGenerationError(ArtifactError):
    """Torrent, thumbnail or preview creation failed. The video must not be persisted."""


class ArtifactReadError(ArtifactError):
    """An on-disk artifact could not be read while exporting a video to a peer."""


class DeletionError(ArtifactError):
    """Cleanup of an artifact failed while removing a video."""
