"""Value objects shared by the media layer."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class DurationSource(str, Enum):
    CONTAINER_HEADER = "container_header"
    METADATA_PROBE = "metadata_probe"
    BITRATE_HEURISTIC = "bitrate_heuristic"
    WORD_COUNT_HEURISTIC = "word_count_heuristic"
    DEFAULT = "default"


@dataclass(frozen=True)
class DurationEstimate:
    seconds: int
    is_exact: bool
    source: DurationSource


@dataclass(frozen=True)
class MediaInfo:
    """Probe result for one input; computed once and never mutated."""

    duration_seconds: float
    container_format: str
    has_audio: bool
    has_video: bool
    sample_rate: Optional[int] = None
    channels: Optional[int] = None


@dataclass(frozen=True)
class AudioWindow:
    start_seconds: int
    duration_seconds: int

    @property
    def end_seconds(self) -> int:
        return self.start_seconds + self.duration_seconds


@dataclass(frozen=True)
class AudioChunk:
    """
    One ordered slice of the processed audio.

    A chunk carrying a ``rejection`` reason could not be materialized within
    the backend limits; it keeps its slot but is never submitted.
    """

    sequence_index: int
    start_seconds: int
    duration_seconds: int
    payload: bytes = b""
    rejection: Optional[str] = None

    @property
    def is_transcribable(self) -> bool:
        return self.rejection is None and len(self.payload) > 0
