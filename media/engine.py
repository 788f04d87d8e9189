"""
Audio engine capability and its process-wide readiness handle.

Every engine (native FFmpeg, metadata-only WAV) implements ``AudioEngine``;
the pipeline depends on this interface only. Engines are expensive to
initialize, so a single ``EngineHandle`` per engine name owns the
initialization and tracks its readiness explicitly:

    UNINITIALIZED -> INITIALIZING -> READY
                                  -> FAILED
"""

import logging
import threading
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, Dict, Optional

from media.exceptions import EngineUnavailableError
from media.models import MediaInfo

logger = logging.getLogger(__name__)


class AudioEngine(ABC):
    """Probe, extract, normalize and split media into mono 16 kHz PCM WAV."""

    name = "abstract"

    def initialize(self) -> None:
        """Acquire external resources; raise EngineUnavailableError on failure."""

    @abstractmethod
    def probe(self, content: bytes, filename: str) -> MediaInfo:
        ...

    @abstractmethod
    def extract_audio(self, content: bytes, filename: str) -> bytes:
        """Drop any video stream and transcode the audio to the target format."""

    @abstractmethod
    def optimize_audio(self, content: bytes, filename: str, normalize: bool = True) -> bytes:
        """Transcode an audio-only input to the target format."""

    @abstractmethod
    def split_window(self, audio: bytes, start_seconds: int, duration_seconds: int) -> bytes:
        """Cut ``[start, start + duration)`` out of target-format audio."""


class EngineState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    FAILED = "failed"


class EngineHandle:
    """
    Lazily initializes one engine and hands out the ready instance.

    ``acquire`` is idempotent and thread-safe: concurrent callers block on the
    lock while the first caller initializes. A failed initialization is
    remembered and re-raised until ``reset`` is called.
    """

    def __init__(self, factory: Callable[[], AudioEngine]):
        self._factory = factory
        self._lock = threading.Lock()
        self._engine: Optional[AudioEngine] = None
        self._error: Optional[Exception] = None
        self.state = EngineState.UNINITIALIZED

    def acquire(self) -> AudioEngine:
        if self.state is EngineState.READY:
            return self._engine

        with self._lock:
            if self.state is EngineState.READY:
                return self._engine
            if self.state is EngineState.FAILED:
                raise EngineUnavailableError(f"Audio engine failed to initialize: {self._error}")

            self.state = EngineState.INITIALIZING
            try:
                engine = self._factory()
                engine.initialize()
            except Exception as e:
                self._error = e
                self.state = EngineState.FAILED
                logger.error("Audio engine initialization failed: %s", e)
                if isinstance(e, EngineUnavailableError):
                    raise
                raise EngineUnavailableError(f"Audio engine failed to initialize: {e}") from e

            self._engine = engine
            self.state = EngineState.READY
            logger.info("Audio engine '%s' ready", engine.name)
            return engine

    def reset(self) -> None:
        with self._lock:
            self._engine = None
            self._error = None
            self.state = EngineState.UNINITIALIZED


_handles: Dict[str, EngineHandle] = {}
_handles_lock = threading.Lock()


def _build_engine(name: str) -> AudioEngine:
    from config import settings

    if name == "ffmpeg":
        from media.ffmpeg_engine import FFmpegEngine
        return FFmpegEngine(ffmpeg_cmd=settings.FFMPEG_BINARY, ffprobe_cmd=settings.FFPROBE_BINARY)
    if name == "wave":
        from media.wave_engine import WaveEngine
        return WaveEngine()
    raise EngineUnavailableError(f"Unknown media engine '{name}'")


def get_engine_handle(name: str) -> EngineHandle:
    """Return the process-wide handle for the named engine."""
    with _handles_lock:
        handle = _handles.get(name)
        if handle is None:
            handle = EngineHandle(lambda: _build_engine(name))
            _handles[name] = handle
        return handle
