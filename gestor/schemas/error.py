"""오류 응답 스키마 (Error envelope schema).

Every error response has a stable `code` and a human-readable `message`.
Used for OpenAPI documentation of the failure responses.
"""

from typing import Any

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    code: str
    message: str
    field: str | None = None  # DuplicateField 전용 (Only set for DuplicateField)
    errors: dict[str, str] | None = None  # ValidationError 전용 (Only set for request validation)
    error: Any | None = None  # development 환경 전용 (Development environment only)
