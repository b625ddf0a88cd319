"""
FastAPI middleware for request tracing and logging.

This module provides middleware that:
- Generates unique request IDs for tracing
- Logs request/response information
- Binds the round session id for correlation when a play route is hit
"""

import time
import uuid
from typing import Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from core.logging import bind_context, clear_context, get_logger


logger = get_logger(__name__)

PLAY_SESSIONS_PREFIX = "/api/play/sessions/"


def extract_session_id(path: str) -> Optional[str]:
    """Return the round session id embedded in a play route path, if any."""
    if not path.startswith(PLAY_SESSIONS_PREFIX):
        return None
    remainder = path[len(PLAY_SESSIONS_PREFIX):]
    session_id = remainder.split("/", 1)[0]
    return session_id or None


class RequestTracingMiddleware(BaseHTTPMiddleware):
    """
    Middleware that adds request tracing and logging.

    Features:
    - Generates unique request_id for each request
    - Logs request start/end with timing
    - Binds request_id, method, path and session_id for all logs of the request
    - Adds X-Request-ID header to response
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4())[:8])

        bind_context(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        session_id = extract_session_id(request.url.path)
        if session_id:
            bind_context(session_id=session_id)

        start_time = time.perf_counter()
        logger.debug("Request started")

        try:
            response = await call_next(request)

            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info(
                "Request completed",
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
            )

            response.headers["X-Request-ID"] = request_id
            return response

        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                "Request failed",
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=round(duration_ms, 2),
            )
            raise

        finally:
            # Prevent context leaking into the next request
            clear_context()
