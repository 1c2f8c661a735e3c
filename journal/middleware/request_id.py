"""
Memory Journal Backend — Request ID Middleware
================================================

What:  Assigns a short id to each request and echoes it in X-Request-ID.
Why:   Error bodies carry only {"message"}; the header is how a client report
       is matched to server log lines.
How:   Client-supplied X-Request-ID is reused, otherwise the first 8 chars of a
       uuid4. Stored in a ContextVar (read by the logging middleware and the
       exception handlers) and in request.state.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one thread each see their own id
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8]
        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers["X-Request-ID"] = rid
        return response
