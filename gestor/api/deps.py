"""FastAPI 의존성 주입 모듈 - 인증 및 권한 검사.

FastAPI dependency injection module - Authentication and authorization.

Authentication Flow (authenticate):
    1. 클라이언트가 Authorization: Bearer <token> 헤더를 전송
       (Client sends Authorization: Bearer <token> header)
    2. 토큰 코덱이 액세스 토큰을 검증 - DB 조회 없음
       (Token codec verifies the access token; no database read)
    3. 만료와 위조를 구분한 401 응답 (Expired and malformed get distinct 401 messages)
    4. 사용자 ID를 request.state.user_id에 저장 (Subject id attached to request.state)

Authorization Flow (authorize):
    1. authenticate로 사용자 ID 확보 (Subject id from authenticate)
    2. DB에서 현재 역할만 조회 (Current role read from the database)
    3. 사용자 없음 → 404, 허용되지 않은 역할 → 403
       (Missing user → 404, role outside the allowed set → 403)
"""

from typing import Annotated, Awaitable, Callable
from uuid import UUID

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from gestor.config import settings
from gestor.database import get_db
from gestor.models.user import UserRole
from gestor.repositories.user_repository import user_repository
from gestor.utils.exceptions import AuthenticationError, AuthorizationError, NotFoundError
from gestor.utils.jwt import TokenFailure, TokenResult, token_codec

# HTTP Bearer 토큰 추출기 - 헤더 누락 시 직접 401 응답
# (Extracts the bearer token; a missing header is answered with our own 401)
security: HTTPBearer = HTTPBearer(auto_error=False)

MISSING_TOKEN = "Access denied, no token provided"
EXPIRED_ACCESS_TOKEN = "Access token expired, request a new one via refresh token"
INVALID_ACCESS_TOKEN = "Invalid access token"


async def authenticate(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> UUID:
    """액세스 토큰에서 인증된 사용자 ID를 추출합니다.

    Verify the bearer access token and return the subject id.

    Args:
        request: 현재 요청 (Current request; receives state.user_id)
        credentials: HTTP Bearer 자격 증명 (Bearer credentials, None when absent)

    Returns:
        UUID: 인증된 사용자 ID (Authenticated subject id)

    Raises:
        AuthenticationError: 토큰 누락, 만료, 또는 무효 (Missing, expired, or invalid token)
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError(MISSING_TOKEN)

    result: TokenResult = token_codec.verify_access_token(credentials.credentials)
    if result.failure is TokenFailure.EXPIRED:
        raise AuthenticationError(EXPIRED_ACCESS_TOKEN)
    if result.failure is TokenFailure.MALFORMED or result.subject_id is None:
        raise AuthenticationError(INVALID_ACCESS_TOKEN)

    try:
        user_id: UUID = UUID(result.subject_id)
    except ValueError:
        raise AuthenticationError(INVALID_ACCESS_TOKEN)

    request.state.user_id = user_id
    return user_id


def authorize(*roles: UserRole) -> Callable[..., Awaitable[UUID]]:
    """역할 기반 권한 검사 의존성 팩토리.

    Dependency factory enforcing that the authenticated user's current role
    is one of `roles`.

    Args:
        roles: 허용되는 역할 집합 (Allowed roles)

    Returns:
        FastAPI 의존성 함수 - 사용자 ID 반환 또는 403/404 발생
        (Dependency returning the subject id, or raising 403/404)
    """
    allowed: frozenset[UserRole] = frozenset(roles)

    async def _check(
        request: Request,
        user_id: Annotated[UUID, Depends(authenticate)],
        db: Annotated[AsyncSession, Depends(get_db)],
    ) -> UUID:
        role: UserRole | None = await user_repository.get_role(db, user_id)
        if role is None:
            raise NotFoundError("User not found")
        if role not in allowed:
            raise AuthorizationError()
        request.state.role = role
        return user_id

    return _check


# 편의 의존성 - Pre-configured role dependencies
require_admin = authorize(UserRole.ADMIN)
require_any_role = authorize(UserRole.ADMIN, UserRole.USER)


class PageParams:
    """목록 조회 파라미터 (limit/offset query parameters with configured bounds)."""

    def __init__(
        self,
        limit: Annotated[int, Query(ge=1, le=settings.MAX_RES_LIMIT)] = settings.DEFAULT_RES_LIMIT,
        offset: Annotated[int, Query(ge=0)] = settings.DEFAULT_RES_OFFSET,
    ) -> None:
        self.limit = limit
        self.offset = offset
