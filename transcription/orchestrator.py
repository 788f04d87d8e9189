"""
Sequential, partial-failure tolerant transcription of ordered audio chunks.

Chunks are submitted one at a time in sequence order. A chunk that cannot be
transcribed (rejected up front, terminal backend error, or retries exhausted)
keeps its slot as a ``[segment N unavailable]`` placeholder so the assembled
transcript never silently loses a span.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from media.models import AudioChunk
from transcription.cancellation import CancellationToken
from transcription.retry import RetryPolicy

logger = logging.getLogger(__name__)

PLACEHOLDER_TEMPLATE = "[segment {number} unavailable]"

BackendCall = Callable[[AudioChunk], str]


def placeholder_for(sequence_index: int) -> str:
    return PLACEHOLDER_TEMPLATE.format(number=sequence_index + 1)


@dataclass(frozen=True)
class TranscriptChunkResult:
    sequence_index: int
    text: str
    succeeded: bool
    attempts: int = 0
    error_message: Optional[str] = None


class TranscriptionOrchestrator:
    def __init__(self, retry_policy: Optional[RetryPolicy] = None, job_id: str = "N/A"):
        self.retry_policy = retry_policy or RetryPolicy()
        self.job_id = job_id

    def run(self, chunks: Iterable[AudioChunk], backend_call: BackendCall,
            cancel_token: Optional[CancellationToken] = None) -> str:
        return self.assemble(self.transcribe_chunks(chunks, backend_call, cancel_token))

    def transcribe_chunks(
        self,
        chunks: Iterable[AudioChunk],
        backend_call: BackendCall,
        cancel_token: Optional[CancellationToken] = None,
        on_chunk_done: Optional[Callable[[int], None]] = None,
    ) -> List[TranscriptChunkResult]:
        """
        Transcribe every chunk in order and return one result per chunk.

        ``on_chunk_done`` receives the number of chunks finished so far.
        """
        results: List[TranscriptChunkResult] = []
        for chunk in chunks:
            if cancel_token is not None:
                cancel_token.raise_if_cancelled(self.job_id)
            results.append(self._transcribe_one(chunk, backend_call, cancel_token))
            # Release the payload before materializing the next chunk
            del chunk
            if on_chunk_done is not None:
                on_chunk_done(len(results))

        failed = sum(1 for r in results if not r.succeeded)
        logger.info("Job %s: %d segments transcribed, %d unavailable",
                    self.job_id, len(results) - failed, failed)
        return results

    def _transcribe_one(self, chunk: AudioChunk, backend_call: BackendCall,
                        cancel_token: Optional[CancellationToken]) -> TranscriptChunkResult:
        index = chunk.sequence_index
        if not chunk.is_transcribable:
            reason = chunk.rejection or "empty payload"
            logger.warning("Job %s: segment %d skipped: %s", self.job_id, index + 1, reason)
            return TranscriptChunkResult(index, placeholder_for(index), False, 0, reason)

        outcome = self.retry_policy.run(
            lambda: backend_call(chunk),
            cancel_token=cancel_token,
            label=f"Segment {index + 1}",
            job_id=self.job_id,
        )
        if outcome.succeeded:
            return TranscriptChunkResult(index, (outcome.value or "").strip(), True, outcome.attempts)

        return TranscriptChunkResult(
            index, placeholder_for(index), False, outcome.attempts, str(outcome.error),
        )

    @staticmethod
    def assemble(results: Iterable[TranscriptChunkResult]) -> str:
        """Join chunk texts strictly by sequence index."""
        ordered = sorted(results, key=lambda r: r.sequence_index)
        return " ".join(r.text for r in ordered if r.text)
