"""
Hosted transcription through the OpenAI audio API.

The client's own retries are disabled; retrying is owned by the orchestrator
so every attempt is counted and backed off in one place.
"""

import logging
from typing import Optional

from media.containers import detect_mime_type
from media.exceptions import PayloadTooLargeError
from transcription.backends import BackendTranscript, TranscriptionBackend
from transcription.exceptions import BackendCallError, ConfigurationError

try:
    import openai
except ImportError:
    openai = None

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = {408, 409, 429}


class OpenAIWhisperBackend(TranscriptionBackend):
    name = "openai"

    def __init__(self, api_key: Optional[str], model: str = "whisper-1",
                 base_url: Optional[str] = None, max_payload_bytes: Optional[int] = None,
                 timeout: float = 300.0):
        super().__init__(max_payload_bytes)
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.timeout = timeout
        self._client = None

    def ensure_configured(self) -> None:
        if openai is None:
            raise ConfigurationError("The openai package is not installed")
        if not self.api_key:
            raise ConfigurationError("OPENAI_API_KEY is not set")

    def _get_client(self):
        if self._client is None:
            self.ensure_configured()
            self._client = openai.OpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                max_retries=0,
                timeout=self.timeout,
            )
        return self._client

    def transcribe(self, payload: bytes, filename: str, language: Optional[str] = None) -> BackendTranscript:
        self.check_payload(payload)
        client = self._get_client()

        kwargs = {
            "model": self.model,
            "file": (filename, payload, detect_mime_type(payload, filename)),
        }
        if language:
            kwargs["language"] = language

        try:
            response = client.audio.transcriptions.create(**kwargs)
        except openai.APIStatusError as e:
            status = e.status_code
            if status == 413:
                raise PayloadTooLargeError(f"{filename} rejected as too large") from e
            if status in (401, 403):
                raise ConfigurationError(f"OpenAI rejected the credentials ({status})") from e
            retryable = status in RETRYABLE_STATUS or status >= 500
            raise BackendCallError(
                f"OpenAI transcription of {filename} failed ({status}): {e.message}",
                retryable=retryable,
                status_code=status,
            ) from e
        except openai.APIError as e:
            # Connection errors and timeouts
            raise BackendCallError(f"OpenAI transcription of {filename} failed: {e}") from e

        text = response if isinstance(response, str) else getattr(response, "text", "")
        return BackendTranscript(text=(text or "").strip(), language=language)
