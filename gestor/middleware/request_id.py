"""요청 ID 미들웨어 - 요청 상관관계 ID.

Request id middleware. Reuses an incoming X-Request-Id header or creates a
new id, binds it to the logging context, and echoes it on the response.
"""

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from gestor.logger import request_id_var, set_request_id

REQUEST_ID_HEADER = "X-Request-Id"


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        incoming = request.headers.get(REQUEST_ID_HEADER)
        # 과도하게 긴 외부 ID는 무시 (Oversized client ids are replaced)
        request_id = set_request_id(incoming if incoming and len(incoming) <= 128 else None)
        request.state.request_id = request_id
        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id")
            request_id_var.set(None)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
