"""Creation and removal of the files that accompany a video record.

Owned videos get a torrent, a thumbnail and a preview generated from their
source file. Remote videos only get a local copy of the thumbnail sent by the
origin peer. Removal mirrors that split.

Units for one video run concurrently in worker threads and are joined before
returning. A failing unit never cancels its siblings (blocking work in a
thread cannot be interrupted anyway), so on failure some artifacts may already
exist on disk. Set ``ARTIFACT_CLEANUP_ON_FAILURE`` to have them removed before
the error is raised.
"""

import asyncio
import logging
import os
from functools import partial
from typing import Any, Callable

from peervid.core.config import Settings, get_settings
from peervid.core.errors import ArtifactGenerationError, DeletionError
from peervid.utils.ffmpeg_util import generate_image
from peervid.utils.storage import RemovalOutcome, remove_artifact, write_base64_file
from peervid.utils.torrent import create_torrent, tracker_url, webseed_url

logger = logging.getLogger(__name__)


async def run_blocking(func, *args, **kwargs):
    """Run blocking I/O (ffmpeg, hashing, disk) in a thread pool to avoid blocking the event loop."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, lambda: func(*args, **kwargs))


def _log_late_outcome(label: str, context: str, task: asyncio.Future) -> None:
    if task.cancelled():
        logger.warning(f"{context}: {label} was cancelled after the caller returned")
        return
    exc = task.exception()
    if exc is not None:
        logger.error(f"{context}: {label} failed after the caller returned: {exc}")
    else:
        logger.info(f"{context}: {label} finished after the caller returned")


async def fan_out(
    units: dict[str, Callable[[], Any]],
    fail_fast: bool = False,
    context: str = "",
) -> tuple[dict[str, Any], tuple[str, BaseException] | None]:
    """Run each unit in a worker thread concurrently.

    Returns ``(results, first_error)`` where ``results`` maps unit labels to
    return values of the units that succeeded and ``first_error`` is the
    ``(label, exception)`` of the first unit to fail, in completion order.

    With ``fail_fast`` the call returns as soon as a unit fails; the remaining
    units keep running and their outcome is only logged. Otherwise every unit
    is awaited before returning.
    """
    tasks = {asyncio.ensure_future(run_blocking(func)): label for label, func in units.items()}
    pending = set(tasks)
    results: dict[str, Any] = {}
    first_error: tuple[str, BaseException] | None = None

    while pending:
        done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            label = tasks[task]
            exc = task.exception()
            if exc is None:
                results[label] = task.result()
                continue
            logger.error(f"{context}: {label} failed: {exc}")
            if first_error is None:
                first_error = (label, exc)

        if first_error is not None and fail_fast and pending:
            for task in pending:
                task.add_done_callback(partial(_log_late_outcome, tasks[task], context))
            break

    return results, first_error


async def create_artifacts(
    video,
    source_path: str | None = None,
    *,
    thumbnail_base64: str | None = None,
    settings: Settings | None = None,
):
    """Generate every artifact ``video`` needs before it can be persisted.

    Owned videos: torrent (sets ``info_hash``), thumbnail and preview, all read
    from ``source_path`` (defaults to ``<videos_dir>/<video filename>``).
    Remote videos: ``thumbnail_base64`` is decoded into the thumbnail file; no
    torrent or preview is created.

    Returns the updated video.

    Raises:
        ArtifactGenerationError: If any unit fails
    """
    settings = settings or get_settings()

    if video.is_owned():
        return await _create_owned_artifacts(video, source_path, settings)
    return await _create_remote_artifacts(video, thumbnail_base64, settings)


async def _create_owned_artifacts(video, source_path: str | None, settings: Settings):
    context = f"video {video.id}"
    video_path = source_path or os.path.join(settings.videos_dir, video.get_video_filename())
    video.pod_url = settings.host

    thumbnail_name = video.get_thumbnail_name()
    units = {
        "torrent": partial(
            create_torrent,
            video_path,
            os.path.join(settings.torrents_dir, video.get_torrent_name()),
            tracker_url(settings.ws_url),
            webseed_url(settings.url, settings.static_path_webseed, video.get_video_filename()),
        ),
        "thumbnail": partial(
            generate_image, video_path, settings.thumbnails_dir, thumbnail_name, settings.thumbnail_size
        ),
        "preview": partial(generate_image, video_path, settings.previews_dir, video.get_preview_name()),
    }

    logger.info(f"Generating artifacts for {context} from {video_path}")
    results, first_error = await fan_out(units, fail_fast=False, context=context)

    if first_error is not None:
        label, exc = first_error
        if settings.cleanup_on_failure:
            await _discard_owned_artifacts(video, settings, results)
        raise ArtifactGenerationError(
            f"Failed to create {label} for video {video.id}: {exc}", unit=label, video_id=video.id
        ) from exc

    video.info_hash = results["torrent"]
    video.thumbnail = thumbnail_name
    logger.info(f"Artifacts generated for {context} (info hash {video.info_hash})")
    return video


async def _discard_owned_artifacts(video, settings: Settings, produced: dict[str, Any]) -> None:
    # Failed units may have left partial output behind too, so try every derived file
    units = _removal_units(video, settings, include_source=False)
    logger.info(f"Discarding artifacts of video {video.id} after failed creation (completed: {sorted(produced)})")
    _, error = await fan_out(units, fail_fast=False, context=f"video {video.id} cleanup")
    if error is not None:
        logger.error(f"Cleanup after failed creation left files behind for video {video.id}: {error[1]}")


async def _create_remote_artifacts(video, thumbnail_base64: str | None, settings: Settings):
    if not thumbnail_base64:
        raise ArtifactGenerationError(
            f"Remote video {video.id} has no thumbnail data", unit="thumbnail", video_id=video.id
        )

    thumbnail_name = video.get_thumbnail_name()
    try:
        await run_blocking(write_base64_file, settings.thumbnails_dir, thumbnail_name, thumbnail_base64)
    except (OSError, ValueError) as exc:
        logger.error(f"Cannot write thumbnail of remote video {video.id}: {exc}")
        raise ArtifactGenerationError(
            f"Failed to create thumbnail for video {video.id}: {exc}", unit="thumbnail", video_id=video.id
        ) from exc

    video.thumbnail = thumbnail_name
    return video


def _removal_units(video, settings: Settings, include_source: bool = True) -> dict[str, Callable[[], RemovalOutcome]]:
    units = {"thumbnail": partial(remove_artifact, settings.thumbnails_dir, video.get_thumbnail_name())}
    if video.is_owned():
        if include_source:
            units["file"] = partial(remove_artifact, settings.videos_dir, video.get_video_filename())
        units["torrent"] = partial(remove_artifact, settings.torrents_dir, video.get_torrent_name())
        units["preview"] = partial(remove_artifact, settings.previews_dir, video.get_preview_name())
    return units


async def delete_artifacts(
    video,
    *,
    settings: Settings | None = None,
    fail_fast: bool | None = None,
) -> dict[str, RemovalOutcome]:
    """Remove the files belonging to ``video``: the thumbnail always, plus the
    source file, torrent and preview for owned videos.

    Files that are already gone are reported as ``RemovalOutcome.NOT_FOUND``.
    ``fail_fast`` defaults to ``ARTIFACT_DELETION_POLICY``: when set, the first
    failure is raised without waiting for the other removals.

    Raises:
        DeletionError: If a removal fails for a reason other than the file being absent
    """
    settings = settings or get_settings()
    if fail_fast is None:
        fail_fast = settings.fail_fast_deletion

    context = f"video {video.id}"
    results, first_error = await fan_out(_removal_units(video, settings), fail_fast=fail_fast, context=context)

    if first_error is not None:
        label, exc = first_error
        raise DeletionError(
            f"Failed to remove {label} of video {video.id}: {exc}", unit=label, video_id=video.id
        ) from exc

    logger.info(f"Artifacts removed for {context}: {', '.join(f'{k}={v.value}' for k, v in sorted(results.items()))}")
    return results
