"""Request id propagation: ``X-Request-ID`` in, the same id out and in every log record."""
from __future__ import annotations

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

correlation_id_ctx: ContextVar[str] = ContextVar("correlation_id", default="")

HEADER = "X-Request-ID"
MAX_LENGTH = 128
_SAFE_ID = re.compile(r"^[A-Za-z0-9._:-]+$")


def resolve_request_id(incoming: str | None) -> str:
    """Reuse the caller's id when it is short and log-safe, otherwise mint one."""
    if incoming and len(incoming) <= MAX_LENGTH and _SAFE_ID.match(incoming):
        return incoming
    return uuid.uuid4().hex


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        cid = resolve_request_id(request.headers.get(HEADER))
        token = correlation_id_ctx.set(cid)
        try:
            response = await call_next(request)
        finally:
            correlation_id_ctx.reset(token)
        response.headers[HEADER] = cid
        return response
