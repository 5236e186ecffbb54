"""
Request Context Middleware

Binds a request id (taken from ``X-Request-ID`` or generated) to the
structlog context so every log line of a request carries it, and echoes
the id back in the response header.
"""

import uuid

from fastapi import FastAPI, Request

from reelcore.shared.core.logging import clear_log_context, log_context


REQUEST_ID_HEADER = "X-Request-ID"


def setup_request_context(app: FastAPI) -> None:
    """Register the request context middleware."""

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        clear_log_context()
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        log_context(request_id=request_id, method=request.method, path=request.url.path)

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
