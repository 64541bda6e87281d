"""인증 관련 Pydantic 요청/응답 스키마 정의.

Authentication-related Pydantic request/response schema definitions.
Covers registration, login, and access token refresh. The refresh token
itself never appears in a body; it travels in the `refreshToken` cookie.
"""

from pydantic import EmailStr, Field, field_validator

from gestor.models.user import UserRole
from gestor.schemas.user import EMAIL_MAX_LENGTH, CamelModel, UserPublic


class LoginRequest(CamelModel):
    """로그인 요청 스키마.

    Login request schema.

    Attributes:
        email: 이메일 (Login email, max 50 chars)
        password: 비밀번호 (Plain text, compared against the bcrypt hash)
    """

    email: EmailStr
    password: str = Field(min_length=4)  # 평문 - 서버에서 bcrypt 해시와 비교 (Plain text)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        v = v.strip().lower()
        if len(v) > EMAIL_MAX_LENGTH:
            raise ValueError(f"Email must be at most {EMAIL_MAX_LENGTH} characters")
        return v


class RegisterRequest(LoginRequest):
    """회원가입 요청 스키마.

    Registration request schema. Requesting role "admin" is only honored
    for emails on the admin allow-list.

    Attributes:
        role: 요청 역할 (Requested role, default "user")
        first_name: 이름 (Optional first name, max 20 chars)
        last_name: 성 (Optional last name, max 20 chars)
    """

    role: UserRole = UserRole.USER
    first_name: str | None = Field(default=None, max_length=20)
    last_name: str | None = Field(default=None, max_length=20)


class AuthResponse(CamelModel):
    """세션 발급 응답 스키마 (register / login).

    Session issuance response: public profile plus the access token.
    """

    user: UserPublic
    access_token: str  # 단기 액세스 토큰 (Short-lived access token)


class RefreshResponse(CamelModel):
    """토큰 갱신 응답 스키마 (Token refresh response: {"accessToken": ...})."""

    access_token: str
