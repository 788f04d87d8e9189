"""
End-to-end transcription job: media bytes in, scored transcript out.

Stages:
1. resolve duration and probe the media (independently)
2. extract audio from video, or normalize audio-only input
3. plan windows and materialize chunks when the audio is too long or large
4. transcribe chunks sequentially with bounded retries
5. score the raw transcript, then optionally strip fillers for display

Every failure is caught at the job boundary and returned as an unsuccessful
``ProcessResponse``; nothing escapes to the caller.
"""

import math
import os
import time
import uuid
import logging
from typing import Any, Callable, Mapping, Optional, Union

from analytics.analyzer import SpeechAnalyticsEngine
from analytics.normalizer import TextNormalizer
from media.chunker import AudioChunker
from media.containers import parse_wav_duration
from media.duration import DurationResolver
from media.engine import EngineHandle, get_engine_handle
from media.exceptions import FormatParseError, MediaPipelineError, NoAudioTrackError
from media.models import AudioChunk, DurationEstimate, DurationSource, MediaInfo
from transcription.backends import TranscriptionBackend, build_backend
from transcription.cancellation import CancellationToken
from transcription.exceptions import BackendCallError
from transcription.models import ProcessResponse
from transcription.options import TranscriptionOptions, coerce_options
from transcription.orchestrator import TranscriptionOrchestrator
from transcription.progress import ProgressCallback, ProgressReporter, ProgressStage
from transcription.retry import RetryPolicy
from utils.math import round_half_up

logger = logging.getLogger(__name__)

OptionsInput = Union[TranscriptionOptions, Mapping[str, Any], None]


class TranscriptionPipeline:
    def __init__(
        self,
        engine_handle: EngineHandle,
        backend: TranscriptionBackend,
        resolver: Optional[DurationResolver] = None,
        analytics: Optional[SpeechAnalyticsEngine] = None,
        normalizer: Optional[TextNormalizer] = None,
        max_payload_bytes: int = 20 * 1024 * 1024,
        reduced_chunk_minutes: int = 5,
        retry_base_delay: float = 1.0,
        job_timeout_seconds: Optional[float] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.engine_handle = engine_handle
        self.backend = backend
        self.resolver = resolver or DurationResolver()
        self.analytics = analytics or SpeechAnalyticsEngine()
        self.normalizer = normalizer or TextNormalizer()
        self.max_payload_bytes = max_payload_bytes
        self.reduced_chunk_minutes = reduced_chunk_minutes
        self.retry_base_delay = retry_base_delay
        self.job_timeout_seconds = job_timeout_seconds
        self.sleep = sleep

    @classmethod
    def from_settings(cls, settings) -> "TranscriptionPipeline":
        return cls(
            engine_handle=get_engine_handle(settings.MEDIA_ENGINE),
            backend=build_backend(settings),
            resolver=DurationResolver(settings.DURATION_POLICY, settings.DEFAULT_DURATION_SEC),
            max_payload_bytes=settings.BACKEND_MAX_PAYLOAD_BYTES,
            reduced_chunk_minutes=settings.REDUCED_CHUNK_DURATION_MINUTES,
            retry_base_delay=settings.RETRY_BASE_DELAY_SEC,
            job_timeout_seconds=settings.JOB_TIMEOUT_SEC,
        )

    def process(self, content: bytes, filename: str, options: OptionsInput = None,
                cancel_token: Optional[CancellationToken] = None) -> ProcessResponse:
        return self.process_with_progress(content, filename, options, None, cancel_token)

    def process_with_progress(
        self,
        content: bytes,
        filename: str,
        options: OptionsInput = None,
        on_progress: Optional[ProgressCallback] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> ProcessResponse:
        job_id = uuid.uuid4().hex[:12]
        progress = ProgressReporter(on_progress)
        started = time.perf_counter()
        logger.info("Job %s started: %s (%d bytes)", job_id, filename, len(content or b""))

        try:
            opts = coerce_options(options)
            token = cancel_token or CancellationToken(self.job_timeout_seconds)
            response = self._run(job_id, content, filename, opts, progress, token)
        except MediaPipelineError as e:
            logger.error("Job %s failed (%s): %s", job_id, type(e).__name__, e.message)
            return self._failure(job_id, filename, e.message, e)
        except Exception as e:
            logger.exception("Job %s failed unexpectedly", job_id)
            return self._failure(job_id, filename, str(e), e)

        progress.report(ProgressStage.COMPLETE, 100, "Transcription complete")
        logger.info("Job %s completed in %.2fs", job_id, time.perf_counter() - started)
        return response

    @staticmethod
    def _failure(job_id: str, filename: str, message: str, error: Exception) -> ProcessResponse:
        return ProcessResponse(
            success=False,
            file_name=filename,
            job_id=job_id,
            error=message,
            error_type=type(error).__name__,
        )

    def _run(self, job_id: str, content: bytes, filename: str, opts: TranscriptionOptions,
             progress: ProgressReporter, token: CancellationToken) -> ProcessResponse:
        if not content:
            raise NoAudioTrackError("Uploaded file is empty", job_id)

        # Fail on missing credentials before doing any media work
        self.backend.ensure_configured()
        progress.report(ProgressStage.UPLOAD, 5, "Upload received")

        engine = self.engine_handle.acquire()
        estimate = self.resolver.resolve(content, filename)
        info = engine.probe(content, filename)
        logger.info(
            "Job %s media: format=%s audio=%s video=%s duration=%.1fs (resolved %ds via %s)",
            job_id, info.container_format, info.has_audio, info.has_video,
            info.duration_seconds, estimate.seconds, estimate.source.value,
        )
        if not info.has_audio:
            raise NoAudioTrackError("No audio track found in the file", job_id)
        progress.report(ProgressStage.EXTRACT, 10, "Analyzing media")

        if info.has_video:
            audio = engine.extract_audio(content, filename)
        else:
            audio = engine.optimize_audio(content, filename, normalize=True)
        progress.report(ProgressStage.EXTRACT, 25, "Audio prepared")
        token.raise_if_cancelled(job_id)

        estimate = self._prefer_exact(estimate, info)
        total_seconds = self._processed_seconds(audio, estimate)

        chunk_minutes = opts.chunk_duration_minutes
        if len(audio) > self.max_payload_bytes and chunk_minutes > self.reduced_chunk_minutes:
            logger.info("Job %s: %d bytes exceeds the backend limit, using %d-minute chunks",
                        job_id, len(audio), self.reduced_chunk_minutes)
            chunk_minutes = self.reduced_chunk_minutes

        chunker = AudioChunker(engine, self.max_payload_bytes)
        windows = chunker.plan(total_seconds, chunk_minutes * 60)
        planned = len(windows)
        stem = os.path.splitext(os.path.basename(filename))[0] or "audio"

        def backend_call(chunk: AudioChunk) -> str:
            name = f"{stem}.wav" if planned == 1 else f"{stem}_chunk_{chunk.sequence_index + 1}.wav"
            return self.backend.transcribe(chunk.payload, name, opts.language).text

        def on_chunk_done(done: int) -> None:
            progress.report(ProgressStage.TRANSCRIBE, 40 + 40 * min(done, planned) / planned,
                            f"Transcribed segment {done} of {planned}")

        progress.report(ProgressStage.TRANSCRIBE, 40, f"Transcribing {planned} segment(s)")
        orchestrator = TranscriptionOrchestrator(
            RetryPolicy(opts.max_retries, self.retry_base_delay, self.sleep), job_id,
        )
        results = orchestrator.transcribe_chunks(
            chunker.produce(audio, windows), backend_call, token, on_chunk_done,
        )
        del audio

        failed = sum(1 for r in results if not r.succeeded)
        if results and failed == len(results):
            raise BackendCallError(f"All {failed} segment(s) failed to transcribe", job_id)
        raw_text = orchestrator.assemble(results)

        estimate = self.resolver.refine(estimate, raw_text)
        progress.report(ProgressStage.ANALYZE, 85, "Analyzing speech")
        analytics = self.analytics.analyze(raw_text, estimate.seconds / 60)
        display_text = self.normalizer.strip(raw_text) if opts.remove_filler_words else raw_text

        return ProcessResponse(
            success=True,
            file_name=filename,
            raw_text=raw_text,
            display_text=display_text,
            analytics=analytics,
            filler_words_removed=opts.remove_filler_words,
            duration_seconds=estimate.seconds,
            duration_is_exact=estimate.is_exact,
            duration_source=estimate.source.value,
            segments_total=len(results),
            segments_failed=failed,
            job_id=job_id,
        )

    @staticmethod
    def _prefer_exact(estimate: DurationEstimate, info: MediaInfo) -> DurationEstimate:
        """An engine-probed duration beats a heuristic one."""
        if estimate.is_exact or info.duration_seconds <= 0:
            return estimate
        seconds = max(1, int(round_half_up(info.duration_seconds)))
        return DurationEstimate(seconds, True, DurationSource.METADATA_PROBE)

    @staticmethod
    def _processed_seconds(audio: bytes, estimate: DurationEstimate) -> int:
        """Length of the processed WAV, rounded up so the plan covers every sample."""
        try:
            return max(1, math.ceil(parse_wav_duration(audio)))
        except FormatParseError as e:
            logger.warning("Processed audio has no readable WAV header (%s); planning with %ds",
                           e, estimate.seconds)
            return estimate.seconds
