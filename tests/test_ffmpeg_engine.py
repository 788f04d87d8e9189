from unittest.mock import patch

import ffmpeg
import pytest

from _helpers import make_wav
from media.exceptions import AudioProcessingError, EngineUnavailableError, FormatParseError
from media.ffmpeg_engine import FFmpegEngine

PROBE_VIDEO = {
    "format": {"duration": "12.48", "format_name": "mov,mp4,m4a,3gp,3g2,mj2"},
    "streams": [
        {"codec_type": "video", "disposition": {"attached_pic": 0}},
        {"codec_type": "audio", "sample_rate": "48000", "channels": 2},
    ],
}
PROBE_COVER_ART = {
    "format": {"duration": "200.0", "format_name": "mp3"},
    "streams": [
        {"codec_type": "audio", "sample_rate": "44100", "channels": 2},
        {"codec_type": "video", "disposition": {"attached_pic": 1}},
    ],
}


def test_initialize_requires_binaries():
    with patch("media.ffmpeg_engine.shutil.which", return_value=None):
        with pytest.raises(EngineUnavailableError):
            FFmpegEngine().initialize()


def test_probe_video_container():
    with patch("media.ffmpeg_engine.ffmpeg.probe", return_value=PROBE_VIDEO) as probe:
        info = FFmpegEngine(ffprobe_cmd="/opt/ffprobe").probe(b"\x00" * 64, "talk.mp4")

    assert probe.call_args.kwargs["cmd"] == "/opt/ffprobe"
    assert probe.call_args.args[0].endswith(".mp4")
    assert info.container_format == "mov"
    assert info.has_audio and info.has_video
    assert info.duration_seconds == pytest.approx(12.48)
    assert (info.sample_rate, info.channels) == (48000, 2)


def test_probe_ignores_cover_art():
    with patch("media.ffmpeg_engine.ffmpeg.probe", return_value=PROBE_COVER_ART):
        info = FFmpegEngine().probe(b"ID3" + b"\x00" * 64, "song.mp3")
    assert info.has_audio
    assert not info.has_video


def test_probe_error_is_format_error():
    error = ffmpeg.Error("ffprobe", b"", b"moov atom not found")
    with patch("media.ffmpeg_engine.ffmpeg.probe", side_effect=error):
        with pytest.raises(FormatParseError, match="moov atom not found"):
            FFmpegEngine().probe(b"\x00" * 64, "broken.mp4")


def _fake_run(output: bytes, seen: list):
    def run(stream, **kwargs):
        args = stream.get_args()
        seen.append(args)
        with open(args[-1], "wb") as f:
            f.write(output)
        return b"", b""
    return run


def test_extract_audio_drops_video_and_resamples():
    wav = make_wav(0.5)
    seen = []
    with patch("media.ffmpeg_engine.ffmpeg.run", side_effect=_fake_run(wav, seen)):
        out = FFmpegEngine().extract_audio(b"\x00" * 64, "talk.mp4")

    assert out == wav
    args = seen[0]
    assert "-vn" in args
    assert args[args.index("-ar") + 1] == "16000"
    assert args[args.index("-ac") + 1] == "1"
    assert args[args.index("-acodec") + 1] == "pcm_s16le"


def test_optimize_audio_normalizes_loudness():
    seen = []
    with patch("media.ffmpeg_engine.ffmpeg.run", side_effect=_fake_run(make_wav(0.2), seen)):
        FFmpegEngine().optimize_audio(b"ID3" + b"\x00" * 64, "voice.mp3")
        FFmpegEngine().optimize_audio(b"ID3" + b"\x00" * 64, "voice.mp3", normalize=False)

    assert "dynaudnorm" in seen[0]
    assert "dynaudnorm" not in seen[1]


def test_split_window_seeks_input():
    seen = []
    with patch("media.ffmpeg_engine.ffmpeg.run", side_effect=_fake_run(make_wav(0.2), seen)):
        FFmpegEngine().split_window(make_wav(3.0), 60, 30)

    args = seen[0]
    assert args[args.index("-ss") + 1] == "60"
    assert args[args.index("-t") + 1] == "30"


def test_ffmpeg_failure_is_processing_error():
    error = ffmpeg.Error("ffmpeg", b"", b"Invalid data found when processing input")
    with patch("media.ffmpeg_engine.ffmpeg.run", side_effect=error):
        with pytest.raises(AudioProcessingError, match="Invalid data"):
            FFmpegEngine().extract_audio(b"\x00" * 64, "talk.mp4")


def test_empty_output_is_processing_error():
    with patch("media.ffmpeg_engine.ffmpeg.run", side_effect=_fake_run(b"", [])):
        with pytest.raises(AudioProcessingError):
            FFmpegEngine().optimize_audio(b"\x00" * 64, "voice.wav")
