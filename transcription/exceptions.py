"""Exceptions raised by transcription backends and the job pipeline."""

from typing import Optional

from media.exceptions import MediaPipelineError


class BackendCallError(MediaPipelineError):
    """Raised when a transcription backend call fails."""

    def __init__(self, message: str, job_id: str = "N/A", retryable: bool = True,
                 status_code: Optional[int] = None):
        self.retryable = retryable
        self.status_code = status_code
        super().__init__(message, job_id)


class ConfigurationError(MediaPipelineError):
    """Raised when the job cannot start: missing credentials, unknown backend, bad options."""
    pass


class JobCancelledError(MediaPipelineError):
    """Raised when a job is cancelled or runs past its deadline."""
    pass
