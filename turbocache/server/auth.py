"""Bearer-token authorization gate.

Every request must carry ``Authorization: Bearer <token>`` where ``<token>``
equals the configured secret exactly.  Anything else is answered with 401
before routing, so unknown paths and wrong verbs are rejected the same way.
"""

from __future__ import annotations

import hmac
import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def parse_bearer_token(header: str | None) -> str | None:
    """Return the credential from a ``Bearer`` header, or ``None``.

    The scheme is matched case-sensitively, as build clients always send
    ``Bearer``.
    """
    if not header or not header.startswith(BEARER_PREFIX):
        return None
    return header[len(BEARER_PREFIX):]


def unauthorized_response() -> Response:
    return PlainTextResponse(
        "Unauthorized",
        status_code=401,
        headers={"WWW-Authenticate": "Bearer"},
    )


class BearerAuthMiddleware(BaseHTTPMiddleware):
    """Rejects requests whose bearer credential differs from *token*.

    Parameters
    ----------
    app:
        The wrapped ASGI application.
    token:
        The process-wide shared secret.
    """

    def __init__(self, app: ASGIApp, token: str) -> None:
        super().__init__(app)
        self._token = token.encode("utf-8")

    def is_authorized(self, header: str | None) -> bool:
        credential = parse_bearer_token(header)
        if not credential or not self._token:
            return False
        # Header values arrive latin-1 decoded; re-encoding restores the raw bytes.
        try:
            raw = credential.encode("latin-1")
        except UnicodeEncodeError:
            return False
        return hmac.compare_digest(raw, self._token)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        header = request.headers.get("authorization")
        if not self.is_authorized(header):
            reason = "no bearer token" if parse_bearer_token(header) is None else "invalid token"
            logger.debug(
                "Rejected %s %s: %s", request.method, request.url.path, reason
            )
            return unauthorized_response()
        return await call_next(request)
