"""Magnet link for a video, derived only from the video record and instance settings."""

import torf

from peervid.core.config import REMOTE_SCHEME_HTTP, REMOTE_SCHEME_WS, Settings
from peervid.utils.torrent import tracker_url, webseed_url


def base_urls(video, settings: Settings) -> tuple[str, str]:
    """Return the (http, ws) base URLs serving this video's torrent and tracker."""
    if video.is_owned():
        return settings.url, settings.ws_url
    return f"{REMOTE_SCHEME_HTTP}://{video.pod_url}", f"{REMOTE_SCHEME_WS}://{video.pod_url}"


def build_magnet(video, settings: Settings) -> torf.Magnet:
    base_http, base_ws = base_urls(video, settings)

    return torf.Magnet(
        f"urn:btih:{video.info_hash}",
        dn=video.name,
        xs=f"{base_http}{settings.static_path_torrents}/{video.get_torrent_name()}",
        tr=[tracker_url(base_ws)],
        ws=[webseed_url(base_http, settings.static_path_webseed, video.get_video_filename())],
    )


def generate_magnet_uri(video, settings: Settings) -> str:
    return str(build_magnet(video, settings))
