# config.py
from typing import List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # --- Metadata ---
    APP_NAME: str = "Speech Transcript Scoring API"
    APP_VERSION: str = "1.0.0"
    APP_DESCRIPTION: str = "API for media transcription and speaking-quality analytics"

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None
    JSON_LOGS: bool = False

    # --- CORS ---
    ALLOWED_ORIGINS: List[str] = Field(default_factory=lambda: ["*"])

    # --- Transcription backend ---
    ASR_BACKEND: str = Field("whisper", description="'whisper' (local model) or 'openai' (hosted API)")
    WHISPER_MODEL: str = "base"
    WHISPER_DEVICE: str = "cpu"
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_BASE_URL: Optional[str] = None
    OPENAI_TRANSCRIBE_MODEL: str = "whisper-1"

    # --- Media engine ---
    MEDIA_ENGINE: str = Field("ffmpeg", description="'ffmpeg' or 'wave' (metadata-only, PCM WAV input)")
    FFMPEG_BINARY: str = "ffmpeg"
    FFPROBE_BINARY: str = "ffprobe"

    # --- Chunking / retry ---
    BACKEND_MAX_PAYLOAD_BYTES: int = Field(20 * 1024 * 1024, gt=0)
    CHUNK_DURATION_MINUTES: int = Field(10, ge=1, le=60)
    REDUCED_CHUNK_DURATION_MINUTES: int = Field(5, ge=1, le=60)
    MAX_RETRIES: int = Field(3, ge=1, le=10)
    RETRY_BASE_DELAY_SEC: float = Field(1.0, ge=0.0)
    JOB_TIMEOUT_SEC: Optional[float] = None

    # --- Duration resolution ---
    DURATION_POLICY: str = Field("estimate", description="'estimate' allows the bitrate heuristic, 'strict' skips it")
    DEFAULT_DURATION_SEC: int = Field(60, gt=0)

    # --- Remote media / uploads ---
    DOWNLOAD_TIMEOUT_SEC: float = 30.0
    DOWNLOAD_MAX_BYTES: int = 200 * 1024 * 1024
    UPLOAD_MAX_BYTES: int = 200 * 1024 * 1024


settings = AppSettings()
