"""API sub-routers package.

Currently exposes the `transcription` router. Additional domain routers can be
added here and re-exported for inclusion in the FastAPI `app`.
"""

from .transcription import router  # noqa: F401

__all__ = [
    "router",
]
