"""
Metadata-only engine for inputs that are already in the target format.

It never transcodes: probing reads container headers (and mutagen for
non-WAV inputs), and splitting slices PCM frames with the stdlib ``wave``
module. Useful where no ffmpeg binary is available.
"""

import io
import wave
import logging

from media.constants import TARGET_CHANNELS, TARGET_SAMPLE_RATE, VIDEO_CONTAINERS
from media.containers import detect_container, parse_wav_header
from media.duration import probe_duration_via_mutagen
from media.engine import AudioEngine
from media.exceptions import AudioProcessingError, FormatParseError
from media.models import MediaInfo

logger = logging.getLogger(__name__)


class WaveEngine(AudioEngine):
    name = "wave"

    def probe(self, content: bytes, filename: str) -> MediaInfo:
        container = detect_container(content, filename)
        if container == "wav":
            header = parse_wav_header(content)
            return MediaInfo(
                duration_seconds=header.duration_seconds,
                container_format="wav",
                has_audio=header.channels > 0 and header.data_size > 0,
                has_video=False,
                sample_rate=header.sample_rate,
                channels=header.channels,
            )

        duration = probe_duration_via_mutagen(content)
        return MediaInfo(
            duration_seconds=duration,
            container_format=container,
            has_audio=True,
            has_video=container in VIDEO_CONTAINERS,
        )

    def _require_target_wav(self, content: bytes, filename: str) -> bytes:
        if detect_container(content, filename) != "wav":
            raise AudioProcessingError(f"'{filename}' is not WAV; the wave engine cannot transcode")
        try:
            header = parse_wav_header(content)
        except FormatParseError as e:
            raise AudioProcessingError(f"unreadable WAV header: {e}") from e
        if (header.sample_rate, header.channels, header.bits_per_sample) != (TARGET_SAMPLE_RATE, TARGET_CHANNELS, 16):
            raise AudioProcessingError(
                f"WAV is {header.sample_rate} Hz/{header.channels} ch/{header.bits_per_sample} bit; "
                f"the wave engine only passes through {TARGET_SAMPLE_RATE} Hz mono 16-bit"
            )
        return content

    def extract_audio(self, content: bytes, filename: str) -> bytes:
        return self._require_target_wav(content, filename)

    def optimize_audio(self, content: bytes, filename: str, normalize: bool = True) -> bytes:
        if normalize:
            logger.debug("Loudness normalization is not available in the wave engine; passing through")
        return self._require_target_wav(content, filename)

    def split_window(self, audio: bytes, start_seconds: int, duration_seconds: int) -> bytes:
        try:
            with wave.open(io.BytesIO(audio), "rb") as src:
                params = src.getparams()
                first = start_seconds * params.framerate
                if first >= params.nframes:
                    raise AudioProcessingError(
                        f"window starts at {start_seconds}s beyond the end of the audio"
                    )
                src.setpos(first)
                frames = src.readframes(duration_seconds * params.framerate)
        except (wave.Error, EOFError) as e:
            raise AudioProcessingError(f"cannot slice WAV: {e}") from e

        out = io.BytesIO()
        with wave.open(out, "wb") as dst:
            dst.setnchannels(params.nchannels)
            dst.setsampwidth(params.sampwidth)
            dst.setframerate(params.framerate)
            dst.writeframes(frames)
        return out.getvalue()
