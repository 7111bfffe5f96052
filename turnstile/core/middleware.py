"""HTTP middleware for request ID propagation.

Every request/response pair carries a correlation id so the engine's
``rate_limit.*`` log events can be joined with the access log.

Usage:
    app.middleware("http")(request_id_middleware)
"""

from __future__ import annotations

import uuid

from fastapi import Request, Response

from turnstile.core.config import settings
from turnstile.core.logging import clear_request_id, set_request_id


async def request_id_middleware(request: Request, call_next) -> Response:
    """Accept or generate a request id and echo it on the response.

    The incoming header (``LOG_REQUEST_ID_HEADER``, default ``X-Request-ID``)
    is reused when present, otherwise a UUID4 is generated. The id lives in a
    context variable for the duration of the request only.

    Args:
        request: The incoming HTTP request object.
        call_next: The next middleware/route handler in the stack.

    Returns:
        Response: The downstream response with the request id header set.
    """

    header_name = settings.log.request_id_header
    request_id = request.headers.get(header_name) or str(uuid.uuid4())
    set_request_id(request_id)
    try:
        response: Response = await call_next(request)
    finally:
        clear_request_id()

    response.headers[header_name] = request_id
    return response
