import time
import threading
from typing import Callable, Optional

from transcription.exceptions import JobCancelledError


class CancellationToken:
    """Job-level cancel flag with an optional deadline."""

    def __init__(self, timeout_seconds: Optional[float] = None,
                 clock: Callable[[], float] = time.monotonic):
        self._event = threading.Event()
        self._clock = clock
        self._deadline = clock() + timeout_seconds if timeout_seconds else None

    def cancel(self) -> None:
        self._event.set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and self._clock() >= self._deadline

    @property
    def cancelled(self) -> bool:
        return self._event.is_set() or self.expired

    def raise_if_cancelled(self, job_id: str = "N/A") -> None:
        if self._event.is_set():
            raise JobCancelledError("Job was cancelled", job_id)
        if self.expired:
            raise JobCancelledError("Job exceeded its time limit", job_id)

    def wait(self, seconds: float) -> bool:
        """Sleep up to ``seconds`` (capped at the deadline); True if cancelled meanwhile."""
        if self._deadline is not None:
            seconds = min(seconds, max(0.0, self._deadline - self._clock()))
        self._event.wait(seconds)
        return self.cancelled
