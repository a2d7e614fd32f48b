"""
Request tracing for the updater API
"""

import time
import uuid
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
import logging

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
LATENCY_HEADER = "X-API-Latency-ms"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Tags every request with an id and logs how long it took.

    An incoming ``X-Request-ID`` is kept so a scheduler or proxy can follow a
    triggered update through the logs. Update triggers can run for minutes,
    so the log line is written after the response is produced.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        start_time = time.perf_counter()

        response: Response = await call_next(request)

        latency_ms = int((time.perf_counter() - start_time) * 1000)
        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers[LATENCY_HEADER] = str(latency_ms)

        log = logger.warning if response.status_code >= 500 else logger.info
        log(
            f"[{request_id}] {request.method} {request.url.path} "
            f"-> {response.status_code} ({latency_ms}ms)"
        )
        return response
