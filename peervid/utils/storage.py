"""Local filesystem helpers for artifact files."""

import base64
import binascii
import enum
import logging
import os

logger = logging.getLogger(__name__)


class RemovalOutcome(str, enum.Enum):
    REMOVED = "removed"
    NOT_FOUND = "not_found"


def write_base64_file(folder: str, filename: str, data: str) -> str:
    """Decode base64 ``data`` and write it to ``folder/filename``. Returns the filename.

    Raises:
        ValueError: If ``data`` is not valid base64
        OSError: If the file cannot be written
    """
    try:
        raw = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"Invalid base64 data for {filename}") from exc

    os.makedirs(folder, exist_ok=True)
    path = os.path.join(folder, filename)
    with open(path, "wb") as file_obj:
        file_obj.write(raw)

    logger.info(f"Wrote {len(raw)} bytes to {path}")
    return filename


def read_base64_file(folder: str, filename: str) -> str:
    path = os.path.join(folder, filename)
    with open(path, "rb") as file_obj:
        return base64.b64encode(file_obj.read()).decode("ascii")


def remove_artifact(folder: str, filename: str) -> RemovalOutcome:
    """Delete ``folder/filename``.

    A file that is already gone is reported as ``NOT_FOUND`` rather than
    raised. Any other OSError propagates.
    """
    path = os.path.join(folder, filename)
    try:
        os.unlink(path)
    except FileNotFoundError:
        logger.warning(f"Artifact already absent: {path}")
        return RemovalOutcome.NOT_FOUND

    logger.info(f"Removed artifact: {path}")
    return RemovalOutcome.REMOVED
