import time
import logging
from uuid import uuid4

from fastapi import Request
from fastapi.responses import JSONResponse

from casesheets.config import settings

logger = logging.getLogger("casesheets.api")


async def trace_requests(request: Request, call_next):
    """
    Tags each request with an x-request-id (reusing the caller's when given)
    and, when enabled, logs one line with method, path, status and duration.
    """
    rid = request.headers.get("x-request-id") or uuid4().hex
    request.state.request_id = rid
    started = time.perf_counter()
    status = "error"
    try:
        response = await call_next(request)
        status = response.status_code
        response.headers["x-request-id"] = rid
        return response
    finally:
        if settings.logging.log_requests:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info("%s %s -> %s (%.2fms) rid=%s", request.method, request.url.path, status, elapsed_ms, rid)


async def enforce_body_size(request: Request, call_next):
    max_mb = settings.security.max_body_mb
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > max_mb * 1024 * 1024:
        return JSONResponse(
            status_code=413,
            content={"message": f"El cuerpo de la petición supera {max_mb}MB."},
        )
    return await call_next(request)
