"""전역 예외 핸들러 - 일관된 오류 응답 형식.

Global exception handlers. Every failure leaves the API as one JSON shape:
{"code": ..., "message": ...}. Request validation adds an `errors` map,
duplicates add `field`, and unexpected errors carry an `error` detail only
in development.
"""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from gestor.config import settings
from gestor.logger import get_logger
from gestor.middleware.request_id import REQUEST_ID_HEADER
from gestor.utils.exceptions import AppError, DuplicateFieldError, ValidationError

logger = get_logger(__name__)

# 상태 코드 → 오류 코드 (Stable code for plain HTTPExceptions, e.g. 404 routes)
_STATUS_TO_CODE: dict[int, str] = {
    400: "ValidationError",
    401: "AuthenticationError",
    403: "AuthorizationError",
    404: "NotFound",
    405: "MethodNotAllowed",
    409: "DuplicateField",
    429: "RateLimitError",
}


def _error_code_for_status(status_code: int) -> str:
    if status_code >= 500:
        return "ServerError"
    return _STATUS_TO_CODE.get(status_code, "HTTPError")


def _validation_errors(exc: RequestValidationError) -> dict[str, str]:
    """pydantic 오류 목록 → 필드별 메시지 (Field name → first message)."""
    errors: dict[str, str] = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path", "cookie")]
        field = ".".join(loc) or "body"
        errors.setdefault(field, err.get("msg", "Invalid value"))
    return errors


def register_exception_handlers(app: FastAPI) -> None:
    """앱에 예외 핸들러를 등록합니다 (Install the error envelope handlers)."""

    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
        body: dict[str, Any] = {"code": exc.code, "message": exc.detail}
        if isinstance(exc, DuplicateFieldError):
            body["field"] = exc.field
        log_fn = logger.error if exc.status_code >= 500 else logger.warning
        log_fn(
            "app_error",
            path=request.url.path,
            method=request.method,
            status_code=exc.status_code,
            code=exc.code,
            message=exc.detail,
        )
        return JSONResponse(status_code=exc.status_code, content=body, headers=exc.headers)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        body: dict[str, Any] = {
            "code": _error_code_for_status(exc.status_code),
            "message": str(exc.detail) if exc.detail else "HTTP error",
        }
        return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors: dict[str, str] = _validation_errors(exc)
        logger.info("request_validation_failed", path=request.url.path, fields=sorted(errors))
        return JSONResponse(
            status_code=ValidationError.default_status,
            content={"code": ValidationError.code, "message": ValidationError.default_message, "errors": errors},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled_error", path=request.url.path, method=request.method)
        body: dict[str, Any] = {"code": "ServerError", "message": "Internal server error"}
        if settings.is_development:
            body["error"] = f"{type(exc).__name__}: {exc}"
        # 서버 오류 응답은 미들웨어 밖에서 만들어지므로 요청 ID를 직접 부착
        # (Server error responses are built outside the middleware stack)
        request_id: str | None = getattr(request.state, "request_id", None)
        headers = {REQUEST_ID_HEADER: request_id} if request_id else None
        return JSONResponse(status_code=500, content=body, headers=headers)
