"""HTTP middleware: request correlation and cookie sessions.

Uncaught exceptions are turned into the error envelope by the handlers
registered in ``finessee.main``.
"""

import re
import time
from typing import Callable
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.sessions import SessionMiddleware

from finessee.infrastructure.config import settings

logger = structlog.get_logger()

SESSION_COOKIE = "finessee_session"
REQUEST_ID_HEADER = "X-Request-ID"

# Client IDs end up in log lines and the error envelope.
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,128}$")


def resolve_request_id(header_value: str | None) -> str:
    """Keep a well-formed client request ID, otherwise mint one.

    Args:
        header_value: Raw ``X-Request-ID`` header, if any.

    Returns:
        The client's ID, or a new UUID4 string.
    """
    if header_value and _REQUEST_ID_PATTERN.match(header_value):
        return header_value
    return str(uuid4())


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag each request with a correlation ID and log its outcome.

    The ID is stored on ``request.state`` for the error envelope, bound into
    the structlog context for the duration of the request and echoed in the
    response header.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start_time = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            log = logger.error if status_code >= 500 else logger.info
            log(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=status_code,
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
            structlog.contextvars.unbind_contextvars("request_id")

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def setup_middleware(app: FastAPI) -> None:
    """Configure middleware for the application.

    Middleware is added in reverse order (last added = first executed).

    Args:
        app: FastAPI application instance.
    """
    # Cookie sessions carrying the signed-in user id
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=SESSION_COOKIE,
        max_age=settings.session_max_age,
        same_site="lax",
    )

    # Outermost, so every log line carries the request id
    app.add_middleware(RequestIdMiddleware)
