"""Axiom API 로깅 미들웨어.

Axiom API logging middleware.
Builds one audit event per request (method, path, masked body, status
code, error message, duration, request id). Events go to Axiom when
AXIOM_API_TOKEN and AXIOM_DATASET are set; otherwise they are emitted
through structlog. Sensitive fields (password, token, secret) are masked.
"""

import json
import re
import time
from typing import Any

from axiom_py import Client as AxiomClient
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from gestor.config import settings
from gestor.logger import get_logger, get_request_id

logger = get_logger(__name__)

# 마스킹 대상 필드 패턴 - Fields to mask in request bodies and query strings
_SENSITIVE_KEYS = re.compile(
    r"(password|passwd|secret|token|authorization|cookie|credential)",
    re.IGNORECASE,
)

# 로깅 제외 경로 - Paths excluded from logging
_SKIP_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}


def mask_sensitive(data: Any, depth: int = 0) -> Any:
    """민감 필드 자동 마스킹 - Recursively mask sensitive fields in dicts/lists."""
    if depth > 5:
        return "..."
    if isinstance(data, dict):
        return {
            k: "***" if _SENSITIVE_KEYS.search(str(k)) else mask_sensitive(v, depth + 1)
            for k, v in data.items()
        }
    if isinstance(data, list):
        return [mask_sensitive(item, depth + 1) for item in data[:20]]
    return data


class AxiomLoggingMiddleware(BaseHTTPMiddleware):
    """모든 API 요청/응답을 기록하는 미들웨어.

    Middleware recording every API request/response as an audit event.
    """

    def __init__(self, app: Any) -> None:
        super().__init__(app)
        self._client: AxiomClient | None = None
        self._dataset: str = settings.AXIOM_DATASET

        if settings.AXIOM_API_TOKEN and settings.AXIOM_DATASET:
            self._client = AxiomClient(token=settings.AXIOM_API_TOKEN)

    async def _read_body(self, request: Request) -> Any:
        try:
            body_bytes = await request.body()
            if not body_bytes:
                return None
            return mask_sensitive(json.loads(body_bytes))
        except (json.JSONDecodeError, UnicodeDecodeError):
            return "(non-json body)"

    async def _error_message(self, response: Response) -> tuple[Response, str]:
        """오류 응답 본문에서 message 추출 후 응답 재구성.

        Consume the streamed error body, pull out the envelope message, and
        return an equivalent response.
        """
        resp_body = b""
        async for chunk in response.body_iterator:  # type: ignore[attr-defined]
            resp_body += chunk if isinstance(chunk, bytes) else chunk.encode("utf-8")

        try:
            message = str(json.loads(resp_body).get("message", ""))[:500]
        except (json.JSONDecodeError, UnicodeDecodeError, AttributeError):
            message = resp_body.decode("utf-8", errors="replace")[:500]

        rebuilt = Response(content=resp_body, status_code=response.status_code)
        # set-cookie 등 중복 헤더 보존 (Keeps repeated headers such as set-cookie)
        rebuilt.raw_headers = response.raw_headers
        return rebuilt, message

    def _emit(self, event: dict[str, Any]) -> None:
        if self._client is None:
            log_fn = logger.warning if event["status_code"] >= 400 else logger.info
            log_fn("http_request", **event)
            return
        try:
            self._client.ingest_events(self._dataset, [event])
        except Exception as exc:  # 로깅 실패가 요청 처리에 영향주지 않도록 (Never break a request on log failure)
            logger.warning("axiom_ingest_failed", error=str(exc))

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in _SKIP_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        method = request.method
        request_body: Any = None
        if method in ("POST", "PUT", "PATCH"):
            request_body = await self._read_body(request)

        error_message: str | None = None
        status_code: int = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            if status_code >= 400:
                response, error_message = await self._error_message(response)
        except Exception as exc:
            error_message = f"{type(exc).__name__}: {str(exc)[:300]}"
            raise
        finally:
            event: dict[str, Any] = {
                "method": method,
                "path": request.url.path,
                "status_code": status_code,
                "duration_ms": round((time.perf_counter() - start_time) * 1000, 2),
                "request_id": get_request_id(),
            }
            if request.query_params:
                event["query_params"] = mask_sensitive(dict(request.query_params))
            if request_body is not None:
                event["request_body"] = request_body
            if error_message:
                event["error"] = error_message
            self._emit(event)

        return response
