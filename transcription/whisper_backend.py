"""
Local speech recognition with OpenAI Whisper.

Models are loaded once per (model, device) pair and cached for the life of
the process. Payloads are target-format WAV, so they are decoded in memory
and handed to Whisper as float32 samples without another ffmpeg round trip.
"""

import io
import os
import wave
import logging
import threading
from typing import Any, Dict, Optional

import numpy as np

from media.constants import TARGET_SAMPLE_RATE
from transcription.backends import BackendTranscript, TranscriptionBackend
from transcription.exceptions import BackendCallError, ConfigurationError

# Optional imports with graceful fallbacks
try:
    import torch
except ImportError:
    torch = None

try:
    import whisper
except ImportError:
    whisper = None

logger = logging.getLogger(__name__)

NO_SPEECH_THRESHOLD = 0.6

# Model cache to avoid reloading
_model_cache: Dict[str, Any] = {}
_model_lock = threading.Lock()


def resolve_device(preferred: Optional[str] = None) -> str:
    """Honour an explicit device, otherwise pick the best one torch can see."""
    if preferred in {"cpu", "cuda", "mps"}:
        return preferred
    if torch is not None:
        if torch.cuda.is_available():
            return "cuda"
        if hasattr(torch.backends, "mps") and torch.backends.mps.is_available():
            return "mps"
    return "cpu"


def _get_or_load_model(model_name: str, device: str):
    """Get cached model or load it if not in cache."""
    cache_key = f"{model_name}_{device}"
    with _model_lock:
        if cache_key not in _model_cache:
            cache_dir = os.path.expanduser("~/.cache/whisper")
            os.makedirs(cache_dir, exist_ok=True)
            logger.info("Loading Whisper model '%s' on device '%s' (first time, will be cached)", model_name, device)
            _model_cache[cache_key] = whisper.load_model(model_name, download_root=cache_dir, device=device)
        return _model_cache[cache_key]


def decode_pcm_wav(payload: bytes) -> np.ndarray:
    """16-bit mono PCM WAV bytes -> float32 samples in [-1, 1]."""
    with wave.open(io.BytesIO(payload), "rb") as wav:
        if wav.getsampwidth() != 2 or wav.getnchannels() != 1 or wav.getframerate() != TARGET_SAMPLE_RATE:
            raise BackendCallError(
                f"expected {TARGET_SAMPLE_RATE} Hz mono 16-bit WAV, got "
                f"{wav.getframerate()} Hz/{wav.getnchannels()} ch/{wav.getsampwidth() * 8} bit",
                retryable=False,
            )
        frames = wav.readframes(wav.getnframes())
    return np.frombuffer(frames, dtype=np.int16).astype(np.float32) / 32768.0


class WhisperBackend(TranscriptionBackend):
    name = "whisper"

    def __init__(self, model_name: str = "base", device: Optional[str] = None,
                 max_payload_bytes: Optional[int] = None):
        super().__init__(max_payload_bytes)
        self.model_name = model_name
        self.device = resolve_device(device)

    def ensure_configured(self) -> None:
        if whisper is None:
            raise ConfigurationError(
                "openai-whisper is not installed; install it or set ASR_BACKEND=openai"
            )

    def transcribe(self, payload: bytes, filename: str, language: Optional[str] = None) -> BackendTranscript:
        self.check_payload(payload)
        try:
            samples = decode_pcm_wav(payload)
        except (wave.Error, EOFError) as e:
            raise BackendCallError(f"{filename} is not a readable WAV: {e}", retryable=False) from e

        model = _get_or_load_model(self.model_name, self.device)
        try:
            result = model.transcribe(
                samples,
                language=language,  # None lets Whisper detect it
                task="transcribe",
                verbose=False,
                fp16=self.device == "cuda",
                no_speech_threshold=NO_SPEECH_THRESHOLD,
            )
        except RuntimeError as e:
            raise BackendCallError(f"Whisper failed on {filename}: {e}") from e

        text = (result.get("text") or "").strip()
        logger.debug("Whisper transcribed %s: %d characters", filename, len(text))
        return BackendTranscript(text=text, language=result.get("language"))
