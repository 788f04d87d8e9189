from typing import Any, Mapping, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from transcription.exceptions import ConfigurationError


class TranscriptionOptions(BaseModel):
    """Per-job options, validated once at the job boundary."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    remove_filler_words: bool = False
    chunk_duration_minutes: int = Field(10, ge=1, le=60)
    max_retries: int = Field(3, ge=1, le=10)
    language: Optional[str] = Field(None, description="Forwarded to the backend uninterpreted")

    @field_validator("language")
    @classmethod
    def _blank_language_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None

    @classmethod
    def from_settings(cls, settings, **overrides: Any) -> "TranscriptionOptions":
        values = {
            "chunk_duration_minutes": settings.CHUNK_DURATION_MINUTES,
            "max_retries": settings.MAX_RETRIES,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return coerce_options(values)


def coerce_options(options: Union["TranscriptionOptions", Mapping[str, Any], None]) -> TranscriptionOptions:
    """Accept a record or a plain mapping; invalid input becomes a ConfigurationError."""
    if isinstance(options, TranscriptionOptions):
        return options
    try:
        return TranscriptionOptions(**dict(options or {}))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid transcription options: {e.errors()}") from e
