"""Exceptions raised while preparing, transcribing and scoring media."""


class MediaPipelineError(Exception):
    """Base exception for transcription job failures."""

    def __init__(self, message: str, job_id: str = "N/A"):
        self.message = message
        self.job_id = job_id
        super().__init__(f"[JobID: {job_id}] {message}")


class FormatParseError(MediaPipelineError):
    """Raised when a container header is missing, truncated or inconsistent."""
    pass


class PayloadTooLargeError(MediaPipelineError):
    """Raised when a payload exceeds the transcription backend size ceiling."""
    pass


class NoAudioTrackError(MediaPipelineError):
    """Raised when the probed input carries no audio stream."""
    pass


class AudioProcessingError(MediaPipelineError):
    """Raised when the engine fails to transcode or cut audio."""
    pass


class EngineUnavailableError(MediaPipelineError):
    """Raised when the audio engine cannot be initialized or used."""
    pass


class DownloadError(MediaPipelineError):
    """Raised when remote media cannot be fetched."""
    pass
