from typing import Optional
from pydantic import BaseModel, Field

from analytics.models import SpeechAnalytics


class ProcessResponse(BaseModel):
    """Outcome of one transcription job; failures carry ``error`` instead of a transcript."""

    success: bool
    file_name: str
    raw_text: Optional[str] = None
    display_text: Optional[str] = None
    analytics: Optional[SpeechAnalytics] = None
    filler_words_removed: bool = False
    duration_seconds: Optional[int] = Field(None, gt=0)
    duration_is_exact: Optional[bool] = None
    duration_source: Optional[str] = None
    segments_total: int = 0
    segments_failed: int = 0
    job_id: Optional[str] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
