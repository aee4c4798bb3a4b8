import logging
import math
import os
import subprocess

import ffmpeg

logger = logging.getLogger(__name__)


def probe_duration(video_path: str) -> float:
    """Return the container duration of ``video_path`` in seconds, as reported by ffprobe.

    Raises:
        RuntimeError: If ffprobe fails or reports no duration
    """
    try:
        probe = ffmpeg.probe(video_path)
    except ffmpeg.Error as e:
        stderr = e.stderr.decode() if e.stderr else str(e)
        logger.error(f"ffprobe failed for {video_path}: {stderr}")
        raise RuntimeError(f"Failed to probe video: {stderr}") from e

    duration = probe.get('format', {}).get('duration')
    if duration is None:
        raise RuntimeError(f"No duration reported for {video_path}")
    return float(duration)


def get_duration_from_file(video_path: str) -> int:
    """Duration of a media file in whole seconds (floored, never rounded up)."""
    return math.floor(probe_duration(video_path))


def generate_image(video_path: str, folder: str, image_name: str, size: str | None = None) -> str:
    """Extract a single frame from the middle of ``video_path`` into ``folder/image_name``.

    Args:
        video_path: Source media file
        folder: Output directory, created if missing
        image_name: Output filename (e.g. '<id>.jpg')
        size: Optional 'WIDTHxHEIGHT'. Thumbnails pass one, previews keep the
              source resolution. Both are taken from the same instant.

    Returns:
        The image name that was written.

    Raises:
        RuntimeError: If probing or frame extraction fails
    """
    logger.info(f"Generating image {image_name} for {video_path} (size={size or 'source'})")

    os.makedirs(folder, exist_ok=True)
    output_file = os.path.join(folder, image_name)

    time_offset = probe_duration(video_path) / 2

    output_options = {'vframes': 1}
    if size:
        output_options['s'] = size

    cmd = (
        ffmpeg.input(video_path, ss=time_offset)
        .output(output_file, **output_options)
        .overwrite_output()
        .compile()
    )

    logger.info(f"Running FFmpeg command: {' '.join(cmd)}")

    process = subprocess.Popen(
        cmd,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        universal_newlines=True
    )
    stdout, stderr = process.communicate()

    if process.returncode != 0:
        logger.error(f"Image generation failed for {image_name}:\nSTDERR:\n{stderr}")
        raise RuntimeError(f"Image generation failed: {stderr}")

    logger.info(f"Image generated: {output_file}")
    return image_name
