"""커스텀 HTTP 예외 클래스 모듈.

Custom HTTP exception classes module.
Provides pre-configured HTTPException subclasses for the API error taxonomy.
Every class carries a stable `code` string; the handlers in
gestor.utils.error_handlers render them as {"code": ..., "message": ...}.

Usage:
    from gestor.utils.exceptions import NotFoundError, DuplicateFieldError
    raise NotFoundError("User not found")
    raise DuplicateFieldError("email")
"""

from fastapi import HTTPException, status


class AppError(HTTPException):
    """애플리케이션 예외 베이스 - 상태 코드와 안정적인 오류 코드를 가짐.

    Base class for application errors. Subclasses set `status_code` and `code`.
    """

    code: str = "ServerError"
    default_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, detail: str | None = None, headers: dict[str, str] | None = None) -> None:
        super().__init__(
            status_code=self.default_status,
            detail=detail or self.default_message,
            headers=headers,
        )


class ValidationError(AppError):
    """400 Bad Request - 입력 필드 누락 또는 형식 오류.

    Raised for malformed or missing input fields, before anything is persisted.
    """

    code = "ValidationError"
    default_status = status.HTTP_400_BAD_REQUEST
    default_message = "Validation error"


class AuthenticationError(AppError):
    """401 Unauthorized - 토큰 누락, 무효 또는 만료.

    Raised when the bearer token or refresh token is missing, invalid, or expired.
    Never retried by the server.
    """

    code = "AuthenticationError"
    default_status = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class AuthorizationError(AppError):
    """403 Forbidden - 권한 부족 또는 허용되지 않은 관리자 자가 등록.

    Raised when the authenticated user's role is outside the allowed set,
    or when someone tries to self-register as admin without being on the allow-list.
    """

    code = "AuthorizationError"
    default_status = status.HTTP_403_FORBIDDEN
    default_message = "Access denied, insufficient permissions"


class NotFoundError(AppError):
    """404 Not Found - 요청한 사용자/리소스 없음."""

    code = "NotFound"
    default_status = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class DuplicateFieldError(AppError):
    """409 Conflict - 고유 제약 조건 위반.

    Raised when a uniqueness constraint is violated. `field` names the
    offending attribute (e.g. "email", "username").

    Args:
        field: 중복된 필드 이름 (Name of the duplicated field)
    """

    code = "DuplicateField"
    default_status = status.HTTP_409_CONFLICT

    def __init__(self, field: str) -> None:
        self.field: str = field
        super().__init__(f"{field} is already in use")


class RateLimitError(AppError):
    """429 Too Many Requests - 요청 한도 초과."""

    code = "RateLimitError"
    default_status = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Too many requests in a given period, try again later"


class ServerError(AppError):
    """500 Internal Server Error - 예상하지 못한 실패 (저장소 장애 등)."""

    code = "ServerError"
