"""Access logging middleware.

Emits exactly one line per HTTP request with method, path, final status and
elapsed time.  The status is taken from the first ``http.response.start``
message the wrapped application sends, so it is captured no matter how the
handler produced its response.
"""

from __future__ import annotations

import logging
import time
from http import HTTPStatus

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from turbocache.logging_config import ACCESS_LOGGER_NAME


def _reason_phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return ""


class RequestLoggingMiddleware:
    """Pure ASGI middleware; install it outermost so it also sees 401s.

    If the wrapped application raises before starting a response, the
    request is logged with status 500 and the exception propagates.
    """

    def __init__(self, app: ASGIApp, logger: logging.Logger | None = None) -> None:
        self.app = app
        self.logger = logger or logging.getLogger(ACCESS_LOGGER_NAME)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start = time.perf_counter()
        status_code: int | None = None

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start" and status_code is None:
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            final_status = status_code if status_code is not None else 500
            elapsed_ms = (time.perf_counter() - start) * 1000.0
            self.logger.info(
                "%s %s -> %d %s (%.2fms)",
                scope["method"],
                scope["path"],
                final_status,
                _reason_phrase(final_status),
                elapsed_ms,
            )
