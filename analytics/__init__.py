"""Transcript analytics package.

This module exports the main components:
- SpeechAnalyticsEngine: scores pace, fillers, vocabulary and confidence
- TextNormalizer: display-only filler stripping
"""

from .analyzer import SpeechAnalyticsEngine
from .normalizer import TextNormalizer

__all__ = [
    "SpeechAnalyticsEngine",
    "TextNormalizer",
]
