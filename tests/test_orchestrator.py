import pytest

from media.models import AudioChunk
from transcription.cancellation import CancellationToken
from transcription.exceptions import BackendCallError, JobCancelledError
from transcription.orchestrator import TranscriptChunkResult, TranscriptionOrchestrator, placeholder_for
from transcription.retry import RetryPolicy


def chunk(i, payload=b"pcm", rejection=None):
    return AudioChunk(i, i * 60, 60, payload=payload if rejection is None else b"", rejection=rejection)


def orchestrator(max_retries=2):
    return TranscriptionOrchestrator(RetryPolicy(max_retries, 1.0, sleep=lambda s: None), job_id="test")


def test_texts_joined_in_sequence_order():
    text = orchestrator().run([chunk(0), chunk(1), chunk(2)], lambda c: f" part{c.sequence_index} ")
    assert text == "part0 part1 part2"


def test_failed_chunk_keeps_its_slot():
    def call(c):
        if c.sequence_index == 1:
            raise BackendCallError("server error")
        return f"part{c.sequence_index}"

    results = orchestrator().transcribe_chunks([chunk(0), chunk(1), chunk(2)], call)
    assert [r.succeeded for r in results] == [True, False, True]
    assert results[1].attempts == 2
    assert results[1].text == "[segment 2 unavailable]"
    assert TranscriptionOrchestrator.assemble(results) == "part0 [segment 2 unavailable] part2"


def test_rejected_chunk_is_never_submitted():
    submitted = []

    def call(c):
        submitted.append(c.sequence_index)
        return "ok"

    results = orchestrator().transcribe_chunks([chunk(0), chunk(1, rejection="too large")], call)
    assert submitted == [0]
    assert results[1].text == placeholder_for(1)
    assert results[1].attempts == 0
    assert results[1].error_message == "too large"


def test_assemble_sorts_by_index():
    results = [
        TranscriptChunkResult(2, "c", True),
        TranscriptChunkResult(0, "a", True),
        TranscriptChunkResult(1, "", True),
    ]
    assert TranscriptionOrchestrator.assemble(results) == "a c"


def test_progress_callback_counts_finished_chunks():
    done = []
    orchestrator().transcribe_chunks([chunk(0), chunk(1)], lambda c: "x", on_chunk_done=done.append)
    assert done == [1, 2]


def test_cancellation_between_chunks():
    token = CancellationToken()
    submitted = []

    def call(c):
        submitted.append(c.sequence_index)
        token.cancel()
        return "first"

    with pytest.raises(JobCancelledError):
        orchestrator().transcribe_chunks([chunk(0), chunk(1)], call, cancel_token=token)
    assert submitted == [0]


def test_chunks_are_consumed_lazily():
    produced = []

    def generate():
        for i in range(3):
            produced.append(i)
            yield chunk(i)

    def call(c):
        # only the chunk being transcribed has been materialized
        assert produced[-1] == c.sequence_index
        return "x"

    orchestrator().transcribe_chunks(generate(), call)
    assert produced == [0, 1, 2]
