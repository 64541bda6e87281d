"""사용자 관련 Pydantic 요청/응답 스키마 정의.

User-related Pydantic request/response schema definitions.
Field names are snake_case in Python and camelCase on the wire
(e.g. first_name ↔ firstName). The password hash never appears in any
response schema.
"""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints, field_validator
from pydantic.alias_generators import to_camel

from gestor.models.user import UserRole

EMAIL_MAX_LENGTH = 50

# 앞뒤 공백 제거 후 길이 검사 (Whitespace is stripped before the length checks)
Username = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=20)]
PersonName = Annotated[str, StringConstraints(strip_whitespace=True, max_length=20)]


class CamelModel(BaseModel):
    """camelCase 별칭을 사용하는 베이스 모델.

    Base model serializing with camelCase aliases and accepting either
    spelling on input.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserPublic(CamelModel):
    """공개 사용자 프로필 응답 스키마.

    Public user profile. Returned by register, login, and the user endpoints.

    Attributes:
        id: 사용자 UUID (User unique identifier)
        username: 사용자명 (Generated username)
        email: 이메일 (Login email)
        role: 역할 (admin | user)
        first_name: 이름 (Optional first name)
        last_name: 성 (Optional last name)
        created_at: 생성 일시 (Creation timestamp)
    """

    id: str
    username: str
    email: str
    role: UserRole
    first_name: str | None = None
    last_name: str | None = None
    created_at: datetime | None = None


class UserResponse(CamelModel):
    """단일 사용자 응답 래퍼 (Single user envelope: {"user": {...}})."""

    user: UserPublic


class UserListResponse(CamelModel):
    """사용자 목록 응답 스키마.

    Paginated user list response. Echoes the requested window and the total.
    """

    limit: int
    offset: int
    total: int
    users: list[UserPublic]


class UserUpdateRequest(CamelModel):
    """현재 사용자 정보 수정 요청 스키마 (부분 업데이트).

    Current user update request schema (partial update). Only fields that
    are present are changed; the password is re-hashed by the service.

    Attributes:
        username: 새 사용자명 (New username, max 20 chars)
        email: 새 이메일 (New email, max 50 chars)
        password: 새 비밀번호 (New password, min 8 chars)
        first_name: 이름 (First name, max 20 chars)
        last_name: 성 (Last name, max 20 chars)
    """

    username: Username | None = None
    email: EmailStr | None = None
    password: str | None = Field(default=None, min_length=8)
    first_name: PersonName | None = None
    last_name: PersonName | None = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip().lower()
        if len(v) > EMAIL_MAX_LENGTH:
            raise ValueError(f"Email must be at most {EMAIL_MAX_LENGTH} characters")
        return v
