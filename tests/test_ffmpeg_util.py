from unittest.mock import MagicMock, patch

import ffmpeg
import pytest

from peervid.utils.ffmpeg_util import generate_image, get_duration_from_file


def _popen(returncode=0, stderr=""):
    process = MagicMock()
    process.communicate.return_value = ("", stderr)
    process.returncode = returncode
    return process


class TestDurationProbe:
    @patch("peervid.utils.ffmpeg_util.ffmpeg.probe")
    def test_floors_duration(self, mock_probe):
        mock_probe.return_value = {"format": {"duration": "10.9"}}
        assert get_duration_from_file("sample.mp4") == 10

    @patch("peervid.utils.ffmpeg_util.ffmpeg.probe")
    def test_probe_failure_raises(self, mock_probe):
        mock_probe.side_effect = ffmpeg.Error("ffprobe", "", b"moov atom not found")
        with pytest.raises(RuntimeError, match="moov atom not found"):
            get_duration_from_file("broken.mp4")

    @patch("peervid.utils.ffmpeg_util.ffmpeg.probe")
    def test_missing_duration_raises(self, mock_probe):
        mock_probe.return_value = {"format": {}}
        with pytest.raises(RuntimeError):
            get_duration_from_file("sample.mp4")


@patch("peervid.utils.ffmpeg_util.ffmpeg.probe", return_value={"format": {"duration": "20.0"}})
class TestGenerateImage:
    @patch("peervid.utils.ffmpeg_util.subprocess.Popen")
    def test_thumbnail_is_scaled_frame_from_middle(self, mock_popen, mock_probe, tmp_path):
        mock_popen.return_value = _popen()
        folder = str(tmp_path / "thumbnails")

        assert generate_image("in.mp4", folder, "abc.jpg", "200x110") == "abc.jpg"

        cmd = mock_popen.call_args[0][0]
        assert cmd[0] == "ffmpeg"
        assert cmd[cmd.index("-ss") + 1] == "10.0"
        assert cmd[cmd.index("-i") + 1] == "in.mp4"
        assert cmd[cmd.index("-vframes") + 1] == "1"
        assert cmd[cmd.index("-s") + 1] == "200x110"
        assert str(tmp_path / "thumbnails" / "abc.jpg") in cmd
        assert (tmp_path / "thumbnails").is_dir()

    @patch("peervid.utils.ffmpeg_util.subprocess.Popen")
    def test_preview_keeps_source_resolution(self, mock_popen, mock_probe, tmp_path):
        mock_popen.return_value = _popen()

        generate_image("in.mp4", str(tmp_path), "abc.jpg")

        cmd = mock_popen.call_args[0][0]
        assert "-s" not in cmd
        assert cmd[cmd.index("-ss") + 1] == "10.0"

    @patch("peervid.utils.ffmpeg_util.subprocess.Popen")
    def test_ffmpeg_failure_raises(self, mock_popen, mock_probe, tmp_path):
        mock_popen.return_value = _popen(returncode=1, stderr="Invalid data found")
        with pytest.raises(RuntimeError, match="Invalid data found"):
            generate_image("in.mp4", str(tmp_path), "abc.jpg", "200x110")
