"""Transcription package: backends, retrying chunk orchestration and the job pipeline.

The main entry point is `TranscriptionPipeline.process` (and its
`process_with_progress` variant).
"""

from .options import TranscriptionOptions
from .pipeline import TranscriptionPipeline

__all__ = [
    "TranscriptionOptions",
    "TranscriptionPipeline",
]
