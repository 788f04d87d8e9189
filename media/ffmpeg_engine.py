"""
Native FFmpeg engine built on ffmpeg-python.

Inputs and outputs go through temporary files so ffmpeg can seek and write
complete WAV headers.
"""

import os
import shutil
import logging
import tempfile
from contextlib import contextmanager
from typing import Iterator

from media.constants import TARGET_AUDIO_CODEC, TARGET_CHANNELS, TARGET_SAMPLE_RATE
from media.containers import file_extension
from media.engine import AudioEngine
from media.exceptions import AudioProcessingError, EngineUnavailableError, FormatParseError
from media.models import MediaInfo
from utils.logging import log_execution_time

try:
    import ffmpeg
except ImportError:
    ffmpeg = None

logger = logging.getLogger(__name__)


def _stderr(err) -> str:
    raw = getattr(err, "stderr", None) or b""
    return raw.decode("utf-8", errors="replace").strip()[-500:]


@contextmanager
def _scratch_file(content: bytes, suffix: str) -> Iterator[str]:
    fd, path = tempfile.mkstemp(suffix=suffix)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(content)
        yield path
    finally:
        try:
            os.remove(path)
        except OSError:
            pass


class FFmpegEngine(AudioEngine):
    name = "ffmpeg"

    def __init__(self, ffmpeg_cmd: str = "ffmpeg", ffprobe_cmd: str = "ffprobe"):
        self.ffmpeg_cmd = ffmpeg_cmd
        self.ffprobe_cmd = ffprobe_cmd

    def initialize(self) -> None:
        if ffmpeg is None:
            raise EngineUnavailableError("ffmpeg-python is not installed")
        for cmd in (self.ffmpeg_cmd, self.ffprobe_cmd):
            if shutil.which(cmd) is None:
                raise EngineUnavailableError(f"'{cmd}' is not installed or not in PATH")

    @log_execution_time(logger, logging.DEBUG)
    def probe(self, content: bytes, filename: str) -> MediaInfo:
        suffix = "." + (file_extension(filename) or "bin")
        with _scratch_file(content, suffix) as path:
            try:
                info = ffmpeg.probe(path, cmd=self.ffprobe_cmd)
            except ffmpeg.Error as e:
                raise FormatParseError(f"ffprobe could not read {filename}: {_stderr(e)}") from e

        streams = info.get("streams", [])
        fmt = info.get("format", {})
        audio = next((s for s in streams if s.get("codec_type") == "audio"), None)
        # Cover art in audio files shows up as a single-frame video stream
        video = next(
            (s for s in streams
             if s.get("codec_type") == "video" and not s.get("disposition", {}).get("attached_pic")),
            None,
        )

        return MediaInfo(
            duration_seconds=float(fmt.get("duration") or 0.0),
            container_format=(fmt.get("format_name") or "unknown").split(",")[0],
            has_audio=audio is not None,
            has_video=video is not None,
            sample_rate=int(audio["sample_rate"]) if audio and audio.get("sample_rate") else None,
            channels=int(audio["channels"]) if audio and audio.get("channels") else None,
        )

    def _to_target_wav(self, content: bytes, suffix: str, input_kwargs: dict, output_kwargs: dict) -> bytes:
        with _scratch_file(content, suffix) as src:
            fd, dst = tempfile.mkstemp(suffix=".wav")
            os.close(fd)
            try:
                stream = ffmpeg.input(src, **input_kwargs)
                stream = ffmpeg.output(
                    stream,
                    dst,
                    acodec=TARGET_AUDIO_CODEC,
                    ac=TARGET_CHANNELS,
                    ar=TARGET_SAMPLE_RATE,
                    loglevel="error",
                    **output_kwargs,
                )
                ffmpeg.run(stream, cmd=self.ffmpeg_cmd, overwrite_output=True,
                           capture_stdout=True, capture_stderr=True)
                with open(dst, "rb") as f:
                    data = f.read()
            except ffmpeg.Error as e:
                raise AudioProcessingError(f"ffmpeg failed: {_stderr(e)}") from e
            finally:
                try:
                    os.remove(dst)
                except OSError:
                    pass

        if not data:
            raise AudioProcessingError("ffmpeg produced an empty output file")
        return data

    @log_execution_time(logger)
    def extract_audio(self, content: bytes, filename: str) -> bytes:
        suffix = "." + (file_extension(filename) or "mp4")
        return self._to_target_wav(content, suffix, {}, {"vn": None})

    @log_execution_time(logger)
    def optimize_audio(self, content: bytes, filename: str, normalize: bool = True) -> bytes:
        suffix = "." + (file_extension(filename) or "wav")
        output_kwargs = {"af": "dynaudnorm"} if normalize else {}
        return self._to_target_wav(content, suffix, {}, output_kwargs)

    @log_execution_time(logger, logging.DEBUG)
    def split_window(self, audio: bytes, start_seconds: int, duration_seconds: int) -> bytes:
        return self._to_target_wav(audio, ".wav", {"ss": start_seconds, "t": duration_seconds}, {})
