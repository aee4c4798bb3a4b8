import logging
import os

import torf

logger = logging.getLogger(__name__)

TRACKER_PATH = "/tracker/socket"


def tracker_url(ws_base_url: str) -> str:
    return f"{ws_base_url}{TRACKER_PATH}"


def webseed_url(http_base_url: str, webseed_path: str, video_filename: str) -> str:
    return f"{http_base_url}{webseed_path}/{video_filename}"


def create_torrent(video_path: str, torrent_path: str, announce_url: str, webseed: str) -> str:
    """Build a torrent for ``video_path``, write it to ``torrent_path`` and return its info hash.

    The info hash is read back from the written file so it is exactly what a
    client loading that file would compute (SHA-1 of the bencoded info dict).

    Raises:
        FileNotFoundError: If the source video does not exist
        torf.TorfError: If the torrent cannot be generated, written or read back
    """
    logger.info(f"Creating torrent for {video_path} -> {torrent_path}")

    if not os.path.exists(video_path):
        raise FileNotFoundError(f"Input file not found: {video_path}")

    os.makedirs(os.path.dirname(torrent_path) or ".", exist_ok=True)

    torrent = torf.Torrent(
        path=video_path,
        trackers=[[announce_url]],
        webseeds=[webseed],
        created_by="peervid",
    )
    torrent.generate()
    torrent.write(torrent_path, overwrite=True)

    info_hash = torf.Torrent.read(torrent_path).infohash
    logger.info(f"Torrent written: {torrent_path} (info hash {info_hash})")
    return info_hash
