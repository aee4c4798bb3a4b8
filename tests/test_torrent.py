import os
import re

import pytest
import torf

from peervid.utils.torrent import create_torrent, tracker_url, webseed_url


@pytest.fixture
def media(tmp_path):
    path = tmp_path / "video.mp4"
    path.write_bytes(os.urandom(64 * 1024))
    return str(path)


class TestCreateTorrent:
    def test_writes_torrent_and_returns_info_hash(self, media, tmp_path):
        torrent_path = str(tmp_path / "torrents" / "video.torrent")
        announce = tracker_url("ws://peertube.example:9000")
        seed = webseed_url("http://peertube.example:9000", "/static/webseed", "video.mp4")

        info_hash = create_torrent(media, torrent_path, announce, seed)

        assert re.fullmatch(r"[0-9a-f]{40}", info_hash)
        torrent = torf.Torrent.read(torrent_path)
        assert torrent.infohash == info_hash
        assert [list(tier) for tier in torrent.trackers] == [["ws://peertube.example:9000/tracker/socket"]]
        assert list(torrent.webseeds) == ["http://peertube.example:9000/static/webseed/video.mp4"]

    def test_same_content_and_urls_give_same_info_hash(self, media, tmp_path):
        args = ("ws://h:1/tracker/socket", "http://h:1/static/webseed/video.mp4")
        first = create_torrent(media, str(tmp_path / "a.torrent"), *args)
        second = create_torrent(media, str(tmp_path / "b.torrent"), *args)
        assert first == second

    def test_missing_source_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            create_torrent(
                str(tmp_path / "missing.mp4"),
                str(tmp_path / "x.torrent"),
                "ws://h:1/tracker/socket",
                "http://h:1/static/webseed/missing.mp4",
            )
        assert not (tmp_path / "x.torrent").exists()
