"""API router for media transcription and speech analytics."""
import os
import logging
from functools import lru_cache
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from config import settings
from media.downloader import RemoteDownloader
from media.exceptions import DownloadError
from transcription.exceptions import ConfigurationError
from transcription.models import ProcessResponse
from transcription.options import TranscriptionOptions
from transcription.pipeline import TranscriptionPipeline

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Transcription"])

# Job failures mapped onto HTTP status codes
ERROR_STATUS = {
    "NoAudioTrackError": 422,
    "FormatParseError": 422,
    "AudioProcessingError": 422,
    "ConfigurationError": 503,
    "EngineUnavailableError": 503,
    "BackendCallError": 502,
    "JobCancelledError": 504,
}


@lru_cache(maxsize=1)
def get_pipeline() -> TranscriptionPipeline:
    return TranscriptionPipeline.from_settings(settings)


@lru_cache(maxsize=1)
def get_downloader() -> RemoteDownloader:
    return RemoteDownloader(timeout=settings.DOWNLOAD_TIMEOUT_SEC, max_bytes=settings.DOWNLOAD_MAX_BYTES)


@router.get("/health")
async def health() -> dict:
    return {"status": "ok", "version": settings.APP_VERSION}


@router.post(
    "/v1/transcribe",
    response_model=ProcessResponse,
    responses={
        400: {"description": "Missing input or download failure"},
        413: {"description": "Upload exceeds the size limit"},
        422: {"description": "Invalid options or unreadable media"},
    },
)
async def transcribe(
    media_file: Optional[UploadFile] = File(None),
    media_url: Optional[str] = Form(None),
    remove_filler_words: bool = Form(False),
    chunk_duration_minutes: Optional[int] = Form(None),
    max_retries: Optional[int] = Form(None),
    language: Optional[str] = Form(None),
    pipeline: TranscriptionPipeline = Depends(get_pipeline),
    downloader: RemoteDownloader = Depends(get_downloader),
):
    """
    Transcribes an uploaded file (or one fetched from ``media_url``) and
    scores the speech. The blocking pipeline runs in a worker thread.
    """
    if not media_url and not media_file:
        raise HTTPException(400, "Provide media_url or media_file")

    try:
        options = TranscriptionOptions.from_settings(
            settings,
            remove_filler_words=remove_filler_words,
            chunk_duration_minutes=chunk_duration_minutes,
            max_retries=max_retries,
            language=language,
        )
    except ConfigurationError as e:
        raise HTTPException(422, e.message)

    if media_file:
        content = await media_file.read(settings.UPLOAD_MAX_BYTES + 1)
        if len(content) > settings.UPLOAD_MAX_BYTES:
            raise HTTPException(413,
                                f"Upload exceeds {settings.UPLOAD_MAX_BYTES} bytes")
        filename = os.path.basename(media_file.filename or "upload")
    else:
        try:
            downloaded = await run_in_threadpool(downloader.fetch, media_url)
        except DownloadError as e:
            logger.warning(f"Download failed for {media_url}: {e.message}")
            raise HTTPException(400, e.message)
        content, filename = downloaded.content, downloaded.filename

    result = await run_in_threadpool(pipeline.process, content, filename, options)
    if not result.success:
        code = ERROR_STATUS.get(result.error_type, 500)
        return JSONResponse(status_code=code, content=result.model_dump())
    return result
