# api/core/exception_handlers.py
import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from media.exceptions import EngineUnavailableError, MediaPipelineError
from transcription.exceptions import ConfigurationError

logger = logging.getLogger("api.errors")


async def pipeline_exception_handler(request: Request, exc: MediaPipelineError) -> JSONResponse:
    """
    Handles pipeline errors raised outside a job, e.g. while building the
    pipeline dependency from a misconfigured environment.
    """
    unavailable = isinstance(exc, (ConfigurationError, EngineUnavailableError))
    code = 503 if unavailable else 500
    logger.error(
        f"{type(exc).__name__} for request: {request.method} {request.url.path}: {exc.message}",
        extra={"path": str(request.url.path), "request_id": getattr(request.state, "request_id", None)},
    )
    return JSONResponse(
        status_code=code,
        content={"success": False, "error": exc.message, "error_type": type(exc).__name__},
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Any other unhandled exception becomes a logged, generic 500."""
    logger.error(
        f"Unhandled exception for request: {request.method} {request.url.path}",
        exc_info=True,
        extra={
            "path": str(request.url.path),
            "method": request.method,
            "request_id": getattr(request.state, "request_id", None),
            "error": str(exc),
        },
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal Server Error",
            "detail": "An unexpected error occurred on the server.",
        },
    )


def setup_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MediaPipelineError, pipeline_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
