from urllib.parse import parse_qs, urlsplit

from peervid.utils.magnet import base_urls, generate_magnet_uri

from conftest import OWNED_INFO_HASH


def _params(uri):
    parts = urlsplit(uri)
    assert parts.scheme == "magnet"
    return parse_qs(parts.query)


class TestOwnedMagnet:
    def test_fields(self, owned_video, settings):
        params = _params(generate_magnet_uri(owned_video, settings))

        assert params["xt"] == [f"urn:btih:{OWNED_INFO_HASH}"]
        assert params["dn"] == ["Clip"]
        assert params["xs"] == [
            f"http://peertube.example:9000/static/torrents/{owned_video.id}.torrent"
        ]
        assert params["tr"] == ["ws://peertube.example:9000/tracker/socket"]
        assert params["ws"] == [
            f"http://peertube.example:9000/static/webseed/{owned_video.id}.mp4"
        ]

    def test_https_instance_uses_secure_schemes(self, owned_video, settings):
        secure = settings.model_copy(update={"https": True})
        assert base_urls(owned_video, secure) == (
            "https://peertube.example:9000",
            "wss://peertube.example:9000",
        )
        params = _params(generate_magnet_uri(owned_video, secure))
        assert params["tr"] == ["wss://peertube.example:9000/tracker/socket"]

    def test_is_reproducible(self, owned_video, settings):
        assert generate_magnet_uri(owned_video, settings) == generate_magnet_uri(owned_video, settings)

    def test_name_is_percent_encoded(self, owned_video, settings):
        owned_video.name = "My clip & more"
        uri = generate_magnet_uri(owned_video, settings)
        assert "My clip & more" not in uri
        assert _params(uri)["dn"] == ["My clip & more"]


class TestRemoteMagnet:
    def test_uses_origin_host_with_fixed_schemes(self, remote_video, settings):
        params = _params(generate_magnet_uri(remote_video, settings))
        rid = remote_video.remote_id

        assert params["xs"] == [f"http://peer.example:9001/static/torrents/{rid}.torrent"]
        assert params["tr"] == ["ws://peer.example:9001/tracker/socket"]
        assert params["ws"] == [f"http://peer.example:9001/static/webseed/{rid}.webm"]

    def test_ignores_instance_scheme(self, remote_video, settings):
        secure = settings.model_copy(update={"https": True})
        assert base_urls(remote_video, secure) == ("http://peer.example:9001", "ws://peer.example:9001")
