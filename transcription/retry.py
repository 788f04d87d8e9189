"""
Bounded retry with exponential backoff and typed attempt outcomes.

Each attempt ends as SUCCESS, RETRYABLE_FAILURE or TERMINAL_FAILURE.
Terminal failures (payload too large, rejected format) stop immediately;
retryable ones back off ``base_delay * 2**attempt`` seconds and try again
until ``max_retries`` attempts have been made.
"""

import time
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from media.exceptions import PayloadTooLargeError
from transcription.cancellation import CancellationToken
from transcription.exceptions import BackendCallError, ConfigurationError, JobCancelledError

logger = logging.getLogger(__name__)


class AttemptOutcome(str, Enum):
    SUCCESS = "success"
    RETRYABLE_FAILURE = "retryable_failure"
    TERMINAL_FAILURE = "terminal_failure"


@dataclass(frozen=True)
class RetryResult:
    outcome: AttemptOutcome
    attempts: int
    value: Any = None
    error: Optional[Exception] = None

    @property
    def succeeded(self) -> bool:
        return self.outcome is AttemptOutcome.SUCCESS


def classify_failure(error: Exception) -> AttemptOutcome:
    if isinstance(error, PayloadTooLargeError):
        return AttemptOutcome.TERMINAL_FAILURE
    if isinstance(error, BackendCallError) and not error.retryable:
        return AttemptOutcome.TERMINAL_FAILURE
    return AttemptOutcome.RETRYABLE_FAILURE


class RetryPolicy:
    def __init__(self, max_retries: int = 3, base_delay: float = 1.0,
                 sleep: Optional[Callable[[float], None]] = None):
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.sleep = sleep

    def backoff(self, attempt: int) -> float:
        """Delay after the given 1-based attempt."""
        return self.base_delay * (2 ** attempt)

    def run(self, call: Callable[[], Any], cancel_token: Optional[CancellationToken] = None,
            label: str = "call", job_id: str = "N/A") -> RetryResult:
        """
        Invoke ``call`` until it succeeds, fails terminally or attempts run out.

        Configuration and cancellation errors are not attempt failures; they
        propagate to the caller untouched.
        """
        last_error: Optional[Exception] = None
        for attempt in range(1, self.max_retries + 1):
            if cancel_token is not None:
                cancel_token.raise_if_cancelled(job_id)
            try:
                return RetryResult(AttemptOutcome.SUCCESS, attempt, value=call())
            except (ConfigurationError, JobCancelledError):
                raise
            except Exception as e:
                last_error = e
                if classify_failure(e) is AttemptOutcome.TERMINAL_FAILURE:
                    logger.warning("%s failed terminally on attempt %d: %s", label, attempt, e)
                    return RetryResult(AttemptOutcome.TERMINAL_FAILURE, attempt, error=e)

                if attempt < self.max_retries:
                    delay = self.backoff(attempt)
                    logger.warning(
                        "%s failed (attempt %d/%d), retrying in %.1fs: %s",
                        label, attempt, self.max_retries, delay, e,
                    )
                    self._pause(delay, cancel_token, job_id)
                else:
                    logger.error("%s failed after %d attempts: %s", label, attempt, e)

        return RetryResult(AttemptOutcome.RETRYABLE_FAILURE, self.max_retries, error=last_error)

    def _pause(self, delay: float, cancel_token: Optional[CancellationToken], job_id: str) -> None:
        """Back off between attempts; an injected ``sleep`` replaces the token's interruptible wait."""
        if self.sleep is not None:
            self.sleep(delay)
        elif cancel_token is not None:
            cancel_token.wait(delay)
        else:
            time.sleep(delay)
        if cancel_token is not None:
            cancel_token.raise_if_cancelled(job_id)
