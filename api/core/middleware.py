# api/core/middleware.py
import logging
import time
import uuid
from typing import Callable
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from config import AppSettings

logger = logging.getLogger("api.middleware")

REQUEST_ID_HEADER = "X-Request-ID"


async def request_context_middleware(request: Request, call_next: Callable) -> Response:
    """
    Tags every request with an id (the caller's ``X-Request-ID`` when given),
    logs start and completion, and reports processing time in a header.
    """
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:16]
    request.state.request_id = request_id
    start = time.perf_counter()

    logger.info(
        f"Request started: {request.method} {request.url.path}",
        extra={"request_id": request_id, "method": request.method, "path": str(request.url.path)},
    )

    response = await call_next(request)

    elapsed_ms = (time.perf_counter() - start) * 1000
    response.headers["X-Process-Time-ms"] = f"{elapsed_ms:.2f}"
    response.headers[REQUEST_ID_HEADER] = request_id

    logger.info(
        f"Request completed: {request.method} {request.url.path} {response.status_code}",
        extra={"request_id": request_id, "status_code": response.status_code,
               "process_time_ms": round(elapsed_ms, 2)},
    )
    return response


def setup_middleware(app: FastAPI, settings: AppSettings) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        expose_headers=["X-Process-Time-ms", REQUEST_ID_HEADER],
    )
    app.middleware("http")(request_context_middleware)
