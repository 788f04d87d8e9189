from unittest.mock import MagicMock

import pytest

from media.exceptions import PayloadTooLargeError
from transcription.cancellation import CancellationToken
from transcription.exceptions import BackendCallError, ConfigurationError, JobCancelledError
from transcription.retry import AttemptOutcome, RetryPolicy, classify_failure


def make_policy(max_retries=3):
    sleeps = []
    return RetryPolicy(max_retries=max_retries, base_delay=1.0, sleep=sleeps.append), sleeps


def test_success_on_first_attempt():
    policy, sleeps = make_policy()
    result = policy.run(lambda: "hello")
    assert result.succeeded
    assert (result.value, result.attempts) == ("hello", 1)
    assert sleeps == []


def test_retryable_failure_then_success_backs_off():
    policy, sleeps = make_policy()
    call = MagicMock(side_effect=[BackendCallError("503"), "text"])
    result = policy.run(call)
    assert result.succeeded
    assert result.attempts == 2
    assert sleeps == [2.0]


def test_retries_exhausted():
    policy, sleeps = make_policy()
    call = MagicMock(side_effect=BackendCallError("timeout"))
    result = policy.run(call)
    assert result.outcome is AttemptOutcome.RETRYABLE_FAILURE
    assert result.attempts == 3
    assert call.call_count == 3
    assert sleeps == [2.0, 4.0]
    assert isinstance(result.error, BackendCallError)


@pytest.mark.parametrize("error", [
    PayloadTooLargeError("too big"),
    BackendCallError("bad request", retryable=False),
])
def test_terminal_failures_are_not_retried(error):
    policy, sleeps = make_policy()
    call = MagicMock(side_effect=error)
    result = policy.run(call)
    assert result.outcome is AttemptOutcome.TERMINAL_FAILURE
    assert result.attempts == 1
    assert call.call_count == 1
    assert sleeps == []


def test_unknown_errors_are_retryable():
    assert classify_failure(ValueError("boom")) is AttemptOutcome.RETRYABLE_FAILURE
    assert classify_failure(BackendCallError("x", status_code=500)) is AttemptOutcome.RETRYABLE_FAILURE


def test_configuration_error_propagates():
    policy, _ = make_policy()
    with pytest.raises(ConfigurationError):
        policy.run(MagicMock(side_effect=ConfigurationError("no key")))


def test_cancelled_token_stops_before_calling():
    policy, _ = make_policy()
    token = CancellationToken()
    token.cancel()
    call = MagicMock()
    with pytest.raises(JobCancelledError):
        policy.run(call, cancel_token=token)
    call.assert_not_called()


def test_cancellation_interrupts_backoff():
    policy = RetryPolicy(max_retries=3, base_delay=1.0)
    token = MagicMock()
    token.wait.return_value = True
    token.raise_if_cancelled.side_effect = [None, JobCancelledError("cancelled")]
    with pytest.raises(JobCancelledError):
        policy.run(MagicMock(side_effect=BackendCallError("503")), cancel_token=token)
    token.wait.assert_called_once_with(2.0)


def test_expired_deadline_cancels():
    now = [100.0]
    token = CancellationToken(timeout_seconds=5, clock=lambda: now[0])
    assert not token.cancelled
    now[0] = 106.0
    assert token.expired
    with pytest.raises(JobCancelledError):
        token.raise_if_cancelled("job-1")


def test_max_retries_must_be_positive():
    with pytest.raises(ValueError):
        RetryPolicy(max_retries=0)
