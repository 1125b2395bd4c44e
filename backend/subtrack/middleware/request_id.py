"""
SubTrack Backend — Request ID Middleware
=========================================

What:  Tags every request with a correlation ID and echoes it back in the
       X-Request-ID response header.
How:   Accepts the client's X-Request-ID when it is a short token of safe
       characters, otherwise mints one. The ID lives in a ContextVar so the
       access log and the error handlers can read it without the request.

Error bodies carry the same ID, so a user reporting "Failed to load
subscriptions" can be matched to the logged traceback.
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# Client IDs end up in log lines; anything else is replaced
_SAFE_REQUEST_ID = re.compile(r"[A-Za-z0-9._-]{1,64}")

request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def get_request_id() -> str:
    """The current request's correlation ID ("" outside a request)."""
    return request_id_var.get()


def _resolve_request_id(incoming: Optional[str]) -> str:
    if incoming and _SAFE_REQUEST_ID.fullmatch(incoming):
        return incoming
    return uuid.uuid4().hex[:12]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Outermost middleware: binds the correlation ID for the whole request."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = _resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
