"""인증 서비스 - 회원가입, 로그인, 토큰 갱신, 로그아웃 비즈니스 로직.

Auth Service - Business logic for registration, login, access token
refresh, and logout.

Session lifecycle:
    Anonymous -> (register | login) -> ActiveSession
    ActiveSession -> (access expiry) -> AccessExpired -> (refresh) -> ActiveSession
    ActiveSession -> (logout | refresh expiry | revoke) -> Anonymous

Refresh tokens are not rotated on use: the refresher only issues a new
access token, and the ledger entry stays until logout.
"""

from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from gestor.config import Settings, settings
from gestor.logger import get_logger
from gestor.models.user import User, UserRole
from gestor.repositories.token_repository import refresh_token_repository
from gestor.repositories.user_repository import user_repository
from gestor.schemas.auth import AuthResponse, LoginRequest, RefreshResponse, RegisterRequest
from gestor.schemas.user import UserPublic
from gestor.utils.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DuplicateFieldError,
    NotFoundError,
    ServerError,
)
from gestor.utils.jwt import TokenCodec, TokenFailure, TokenResult, token_codec
from gestor.utils.password import hash_password_async, verify_password_async
from gestor.utils.username import generate_username

logger = get_logger(__name__)

# 사용자명 충돌 시 재생성 최대 횟수 (Max regenerations on username collision)
_USERNAME_ATTEMPTS = 5

INVALID_REFRESH_TOKEN = "Invalid refresh token"
EXPIRED_REFRESH_TOKEN = "Refresh token expired, please login again"


@dataclass(frozen=True)
class IssuedSession:
    """발급된 세션 - 응답 본문과 쿠키로 보낼 리프레시 토큰.

    An issued session: the JSON body plus the refresh token destined for the
    `refreshToken` cookie.
    """

    body: AuthResponse
    refresh_token: str


def to_user_public(user: User) -> UserPublic:
    """ORM 사용자 → 공개 프로필 변환 (Never includes the password hash)."""
    return UserPublic(
        id=str(user.id),
        username=user.username,
        email=user.email,
        role=user.role,
        first_name=user.first_name,
        last_name=user.last_name,
        created_at=user.created_at,
    )


class AuthService:
    """인증 관련 비즈니스 로직을 처리하는 서비스.

    Service handling authentication business logic. Receives the immutable
    settings and the token codec by injection.

    Args:
        config: 불변 설정 (Settings; admin allow-list)
        codec: 토큰 코덱 (Token codec used to issue and verify tokens)
    """

    def __init__(self, config: Settings, codec: TokenCodec) -> None:
        self._config = config
        self._codec = codec

    async def _issue_session(self, db: AsyncSession, user: User) -> IssuedSession:
        """토큰 쌍을 발급하고 리프레시 토큰을 원장에 기록합니다.

        Issue an access/refresh pair and record the refresh token in the
        ledger. Existing ledger entries of the user are kept (multi-session).
        """
        subject: str = str(user.id)
        access_token: str = self._codec.issue_access_token(subject)
        refresh_token: str = self._codec.issue_refresh_token(subject)

        await refresh_token_repository.record(db, refresh_token, user.id)
        logger.info("refresh_token_recorded", user_id=subject, refresh_token=refresh_token)

        return IssuedSession(
            body=AuthResponse(user=to_user_public(user), access_token=access_token),
            refresh_token=refresh_token,
        )

    async def _unique_username(self, db: AsyncSession) -> str:
        for _ in range(_USERNAME_ATTEMPTS):
            candidate: str = generate_username()
            if not await user_repository.username_exists(db, candidate):
                return candidate
        raise ServerError("Could not generate a unique username")

    async def register(self, db: AsyncSession, data: RegisterRequest) -> IssuedSession:
        """회원가입을 처리합니다.

        Process registration.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            data: 회원가입 요청 데이터 (Registration request data)

        Returns:
            IssuedSession: 응답 본문과 리프레시 토큰 (Body and refresh token)

        Raises:
            AuthorizationError: 허용 목록에 없는 관리자 등록 (Admin role, email not allow-listed)
            DuplicateFieldError: 이메일 또는 사용자명 중복 (Email or username taken)
        """
        # 권한 상승 차단 - 사용자 생성 전에 거부 (Rejected before any record is created)
        if data.role is UserRole.ADMIN and not self._config.is_whitelisted_admin(data.email):
            logger.warning("admin_registration_rejected", email=data.email)
            raise AuthorizationError("You cannot register as an admin")

        if await user_repository.email_exists(db, data.email):
            raise DuplicateFieldError("email")

        username: str = await self._unique_username(db)
        password_hash: str = await hash_password_async(data.password)

        user: User = User(
            username=username,
            email=data.email,
            password_hash=password_hash,
            role=data.role,
            first_name=data.first_name,
            last_name=data.last_name,
        )
        try:
            user = await user_repository.create(db, user)
        except IntegrityError:
            # 동시 등록 경쟁 - Concurrent registration won the unique constraint
            await db.rollback()
            field: str = "email" if await user_repository.email_exists(db, data.email) else "username"
            raise DuplicateFieldError(field)

        session: IssuedSession = await self._issue_session(db, user)
        logger.info("user_registered", user_id=str(user.id), role=user.role.value)
        return session

    async def login(self, db: AsyncSession, data: LoginRequest) -> IssuedSession:
        """로그인을 처리합니다.

        Process login. An unknown email yields 404; a wrong password yields
        401. Each successful login adds a ledger entry.

        Raises:
            NotFoundError: 이메일에 해당하는 사용자 없음 (No user with that email)
            AuthenticationError: 비밀번호 불일치 (Password mismatch)
        """
        user: User | None = await user_repository.get_by_email(db, data.email)
        if user is None:
            raise NotFoundError("User not found")

        if not await verify_password_async(data.password, user.password_hash):
            raise AuthenticationError("Invalid email or password")

        session: IssuedSession = await self._issue_session(db, user)
        logger.info("user_logged_in", user_id=str(user.id))
        return session

    async def refresh_access_token(self, db: AsyncSession, refresh_token: str | None) -> RefreshResponse:
        """리프레시 토큰으로 새 액세스 토큰을 발급합니다.

        Exchange a ledgered refresh token for a new access token. The ledger
        check comes before signature verification, so a revoked token is
        rejected even while its signature is still valid.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            refresh_token: 쿠키의 리프레시 토큰 (Refresh token from the cookie)

        Returns:
            RefreshResponse: 새 액세스 토큰 (New access token)

        Raises:
            AuthenticationError: 원장에 없음, 만료, 또는 잘못된 토큰
                                 (Not ledgered, expired, or malformed)
        """
        if not refresh_token or not await refresh_token_repository.exists(db, refresh_token):
            raise AuthenticationError(INVALID_REFRESH_TOKEN)

        result: TokenResult = self._codec.verify_refresh_token(refresh_token)
        if result.failure is TokenFailure.EXPIRED:
            raise AuthenticationError(EXPIRED_REFRESH_TOKEN)
        if not result.ok or result.subject_id is None:
            raise AuthenticationError(INVALID_REFRESH_TOKEN)

        return RefreshResponse(access_token=self._codec.issue_access_token(result.subject_id))

    async def logout(self, db: AsyncSession, refresh_token: str | None, user_id: UUID) -> None:
        """로그아웃 처리 - 제시된 리프레시 토큰의 원장 항목을 삭제합니다.

        Delete the ledger entry of the presented refresh token. Other sessions
        of the same user stay active. Missing or unknown tokens are ignored.
        """
        if refresh_token:
            removed: bool = await refresh_token_repository.revoke(db, refresh_token)
            logger.info(
                "refresh_token_revoked",
                user_id=str(user_id),
                refresh_token=refresh_token,
                removed=removed,
            )
        logger.info("user_logged_out", user_id=str(user_id))


# 싱글턴 인스턴스 - Singleton instance
auth_service: AuthService = AuthService(settings, token_codec)
