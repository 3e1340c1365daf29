"""
NoteStash Backend: Request ID Middleware
=========================================

What:  Tags every request with a short correlation id.
How:   Uses the client's X-Request-ID header when present, otherwise the
       first 8 hex characters of a fresh UUID4.

Where the id shows up:
    - request_id_var (ContextVar): read by the access log line and by every
      exception handler in main.py, so each error body carries `request_id`
    - request.state.request_id
    - the X-Request-ID response header (exposed through CORS)

Must be the outermost middleware so the access log already sees the id.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

# Client-supplied ids are echoed into logs and error bodies
MAX_REQUEST_ID_LENGTH = 64


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Sets request_id_var for the request and echoes the id in the response."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID", "")[:MAX_REQUEST_ID_LENGTH]
        rid = rid or uuid.uuid4().hex[:8]
        # Not reset afterwards: the catch-all 500 handler runs in the outermost
        # middleware and still needs the id.
        request_id_var.set(rid)
        request.state.request_id = rid
        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
