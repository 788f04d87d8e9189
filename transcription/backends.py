"""Transcription backend interface and factory."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from media.exceptions import PayloadTooLargeError
from transcription.exceptions import ConfigurationError


@dataclass(frozen=True)
class BackendTranscript:
    text: str
    language: Optional[str] = None


class TranscriptionBackend(ABC):
    """A speech-to-text service that accepts one audio payload per call."""

    name = "abstract"

    def __init__(self, max_payload_bytes: Optional[int] = None):
        self.max_payload_bytes = max_payload_bytes

    def ensure_configured(self) -> None:
        """Raise ConfigurationError if the backend cannot be used at all."""

    def check_payload(self, payload: bytes) -> None:
        if self.max_payload_bytes is not None and len(payload) > self.max_payload_bytes:
            raise PayloadTooLargeError(
                f"{len(payload)} bytes exceeds the {self.name} limit of {self.max_payload_bytes}"
            )

    @abstractmethod
    def transcribe(self, payload: bytes, filename: str, language: Optional[str] = None) -> BackendTranscript:
        ...


def build_backend(settings) -> TranscriptionBackend:
    """Create the backend named by ``settings.ASR_BACKEND``."""
    name = (settings.ASR_BACKEND or "").strip().lower()
    if name == "whisper":
        from transcription.whisper_backend import WhisperBackend
        return WhisperBackend(
            model_name=settings.WHISPER_MODEL,
            device=settings.WHISPER_DEVICE,
            max_payload_bytes=settings.BACKEND_MAX_PAYLOAD_BYTES,
        )
    if name == "openai":
        from transcription.openai_backend import OpenAIWhisperBackend
        return OpenAIWhisperBackend(
            api_key=settings.OPENAI_API_KEY,
            model=settings.OPENAI_TRANSCRIBE_MODEL,
            base_url=settings.OPENAI_BASE_URL,
            max_payload_bytes=settings.BACKEND_MAX_PAYLOAD_BYTES,
        )
    raise ConfigurationError(f"Unknown ASR backend '{settings.ASR_BACKEND}'")
