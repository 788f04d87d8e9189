"""
Chunk planning and materialization for audio that is too long or too large
for a single backend call.
"""

import logging
from typing import Iterator, List, Sequence, Tuple

from media.engine import AudioEngine
from media.exceptions import AudioProcessingError
from media.models import AudioChunk, AudioWindow

logger = logging.getLogger(__name__)


class _WindowRejected(Exception):
    pass


class AudioChunker:
    """
    Splits target-format audio into ordered, size-bounded chunks.

    Chunks are produced lazily so at most one window's payloads are held in
    memory at a time.
    """

    def __init__(self, engine: AudioEngine, max_payload_bytes: int):
        self.engine = engine
        self.max_payload_bytes = max_payload_bytes

    @staticmethod
    def plan(total_seconds: int, max_chunk_seconds: int) -> List[AudioWindow]:
        """Contiguous windows covering ``[0, total_seconds)``; the last one may be shorter."""
        if max_chunk_seconds <= 0:
            raise ValueError("max_chunk_seconds must be positive")
        if total_seconds <= 0:
            raise ValueError("total_seconds must be positive")
        if total_seconds <= max_chunk_seconds:
            return [AudioWindow(0, total_seconds)]

        return [
            AudioWindow(start, min(max_chunk_seconds, total_seconds - start))
            for start in range(0, total_seconds, max_chunk_seconds)
        ]

    def materialize(self, audio: bytes, window: AudioWindow) -> bytes:
        return self.engine.split_window(audio, window.start_seconds, window.duration_seconds)

    def _fit(self, audio: bytes, window: AudioWindow) -> List[Tuple[AudioWindow, bytes]]:
        try:
            payload = self.materialize(audio, window)
        except AudioProcessingError as e:
            raise _WindowRejected(str(e)) from e
        if len(payload) <= self.max_payload_bytes:
            return [(window, payload)]

        if window.duration_seconds < 2:
            raise _WindowRejected(f"{len(payload)} bytes exceeds the {self.max_payload_bytes} byte limit")

        logger.warning(
            "Window at %ds is %d bytes (limit %d); halving once",
            window.start_seconds, len(payload), self.max_payload_bytes,
        )
        del payload
        half = window.duration_seconds // 2
        halves = (
            AudioWindow(window.start_seconds, half),
            AudioWindow(window.start_seconds + half, window.duration_seconds - half),
        )
        parts = []
        for sub in halves:
            try:
                sub_payload = self.materialize(audio, sub)
            except AudioProcessingError as e:
                raise _WindowRejected(str(e)) from e
            if len(sub_payload) > self.max_payload_bytes:
                raise _WindowRejected(
                    f"half window still {len(sub_payload)} bytes (limit {self.max_payload_bytes})"
                )
            parts.append((sub, sub_payload))
        return parts

    def produce(self, audio: bytes, windows: Sequence[AudioWindow]) -> Iterator[AudioChunk]:
        """
        Yield chunks with contiguous sequence indices starting at 0.

        A single window whose audio already fits is passed through untouched.
        A window that cannot be brought under the size limit is yielded once,
        with a rejection reason and no payload.
        """
        if len(windows) == 1 and len(audio) <= self.max_payload_bytes:
            only = windows[0]
            yield AudioChunk(0, only.start_seconds, only.duration_seconds, payload=audio)
            return

        index = 0
        for window in windows:
            try:
                parts = self._fit(audio, window)
            except _WindowRejected as e:
                logger.warning("Window at %ds is un-transcribable: %s", window.start_seconds, e)
                yield AudioChunk(index, window.start_seconds, window.duration_seconds, rejection=str(e))
                index += 1
                continue

            for sub, payload in parts:
                yield AudioChunk(index, sub.start_seconds, sub.duration_seconds, payload=payload)
                index += 1
            del parts
