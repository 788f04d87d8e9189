"""
Duration resolution for untrusted media buffers.

Strategies are tried in order and the first one that produces a value wins:

1. container header parse (exact)
2. secondary metadata probe via mutagen (exact)
3. size/bitrate heuristic (estimate, skipped under the strict policy)
4. word-count estimate, only once a transcript exists
5. a fixed default

The resolver never raises; a failing strategy is logged and the chain moves on.
"""

import io
import logging
from enum import Enum
from typing import Dict, Optional

from media.constants import (
    ASSUMED_BYTE_RATES,
    DEFAULT_ASSUMED_BYTE_RATE,
    ESTIMATED_SPEAKING_WPM,
    MIN_WORD_COUNT_ESTIMATE_SEC,
)
from media.containers import detect_container, parse_container_duration
from media.exceptions import FormatParseError
from media.models import DurationEstimate, DurationSource
from utils.math import round_half_up

try:
    import mutagen
except ImportError:
    mutagen = None

logger = logging.getLogger(__name__)


class DurationPolicy(str, Enum):
    ESTIMATE = "estimate"
    STRICT = "strict"


def _whole_seconds(seconds: float) -> int:
    return max(1, int(round_half_up(seconds)))


def probe_duration_via_mutagen(buffer: bytes) -> float:
    """Duration from mutagen's stream info; raises FormatParseError when unknown."""
    if mutagen is None:
        raise FormatParseError("mutagen is not installed")
    try:
        audio = mutagen.File(io.BytesIO(buffer))
    except mutagen.MutagenError as e:
        raise FormatParseError(f"mutagen could not read stream: {e}") from e
    length = getattr(getattr(audio, "info", None), "length", None)
    if not length or length <= 0:
        raise FormatParseError("mutagen reported no stream length")
    return float(length)


class DurationResolver:
    """Produces a ``DurationEstimate`` for a media buffer."""

    def __init__(
        self,
        policy: str = DurationPolicy.ESTIMATE.value,
        default_seconds: int = 60,
        byte_rates: Optional[Dict[str, int]] = None,
    ):
        self.policy = DurationPolicy(policy)
        self.default_seconds = default_seconds
        self.byte_rates = dict(ASSUMED_BYTE_RATES if byte_rates is None else byte_rates)

    def default(self) -> DurationEstimate:
        return DurationEstimate(self.default_seconds, False, DurationSource.DEFAULT)

    def resolve(self, buffer: bytes, filename: str = "") -> DurationEstimate:
        if not buffer:
            logger.warning("Empty buffer for %s; duration left to the transcript fallback", filename)
            return self.default()

        try:
            seconds = parse_container_duration(buffer, filename)
            return DurationEstimate(_whole_seconds(seconds), True, DurationSource.CONTAINER_HEADER)
        except FormatParseError as e:
            logger.debug("Header parse failed for %s: %s", filename, e)

        try:
            seconds = probe_duration_via_mutagen(buffer)
            return DurationEstimate(_whole_seconds(seconds), True, DurationSource.METADATA_PROBE)
        except FormatParseError as e:
            logger.debug("Metadata probe failed for %s: %s", filename, e)

        if self.policy is DurationPolicy.ESTIMATE:
            return self.estimate_from_size(buffer, filename)

        logger.warning("No exact duration for %s and estimation is disabled", filename)
        return self.default()

    def estimate_from_size(self, buffer: bytes, filename: str = "") -> DurationEstimate:
        container = detect_container(buffer, filename)
        rate = self.byte_rates.get(container, DEFAULT_ASSUMED_BYTE_RATE)
        seconds = max(1, int(round_half_up(len(buffer) / rate)))
        logger.info("Estimated duration of %s from size: %ds at %d B/s", filename, seconds, rate)
        return DurationEstimate(seconds, False, DurationSource.BITRATE_HEURISTIC)

    def estimate_from_transcript(self, text: str) -> Optional[DurationEstimate]:
        word_count = len((text or "").split())
        if word_count == 0:
            return None
        seconds = max(
            MIN_WORD_COUNT_ESTIMATE_SEC,
            int(round_half_up(word_count * 60 / ESTIMATED_SPEAKING_WPM)),
        )
        return DurationEstimate(seconds, False, DurationSource.WORD_COUNT_HEURISTIC)

    def refine(self, estimate: DurationEstimate, transcript: str) -> DurationEstimate:
        """Replace a default estimate with the word-count estimate once text exists."""
        if estimate.source is not DurationSource.DEFAULT:
            return estimate
        from_words = self.estimate_from_transcript(transcript)
        if from_words is None:
            return estimate
        logger.info("Duration estimated from transcript: %ds", from_words.seconds)
        return from_words
