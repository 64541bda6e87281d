"""JWT 토큰 생성 및 검증 유틸리티 모듈.

JWT token codec. Produces and verifies signed, self-contained bearer tokens
without a database lookup.

JWT Payload Structure:
    {
        "sub": "user_uuid",                   # 사용자 ID (Subject identifier)
        "purpose": "accessApi"|"refreshToken",  # 토큰 용도 (Purpose tag)
        "iat": 1234567890,                    # 발급 시각 (Issued at)
        "exp": 1234567890,                    # 만료 시각 (Expiration)
        "jti": "uuid4"                        # 토큰 고유 ID (Unique token id)
    }

Access and refresh tokens are signed with different secrets *and* carry
different purpose tags, so one can never be verified as the other.
Verification returns a TokenResult instead of raising; callers branch on
TokenResult.failure.
"""

import enum
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from gestor.config import Settings, settings

ACCESS_PURPOSE = "accessApi"
REFRESH_PURPOSE = "refreshToken"


class TokenFailure(str, enum.Enum):
    """토큰 검증 실패 유형 (Token verification failure kind)."""

    EXPIRED = "expired"
    MALFORMED = "malformed"


class TokenExpiredError(Exception):
    """만료된 토큰 (Token is past its embedded expiry)."""


class TokenMalformedError(Exception):
    """서명 또는 구조가 잘못된 토큰 (Bad signature, structure, or purpose tag)."""


@dataclass(frozen=True)
class TokenResult:
    """토큰 검증 결과 - Ok(subject_id) 또는 Err(EXPIRED | MALFORMED).

    Verification outcome. Exactly one of subject_id / failure is set.
    """

    subject_id: str | None = None
    failure: TokenFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    def unwrap(self) -> str:
        """성공 시 subject_id 반환, 실패 시 예외 발생.

        Return the subject id, or raise TokenExpiredError / TokenMalformedError.
        """
        if self.failure is TokenFailure.EXPIRED:
            raise TokenExpiredError("token expired")
        if self.failure is TokenFailure.MALFORMED or self.subject_id is None:
            raise TokenMalformedError("token malformed")
        return self.subject_id


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TokenCodec:
    """액세스/리프레시 토큰 서명 및 검증기.

    Signs and verifies access and refresh tokens. Pure: output depends only
    on the injected settings, the input, and the clock.

    Args:
        config: 불변 설정 객체 (Immutable settings; secrets and expiries)
        clock: 현재 시각 함수 (Returns the current UTC time; injectable for tests)
    """

    def __init__(
        self,
        config: Settings,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._algorithm: str = config.JWT_ALGORITHM
        self._access_secret: str = config.JWT_ACCESS_SECRET.get_secret_value()
        self._refresh_secret: str = config.JWT_REFRESH_SECRET.get_secret_value()
        self._access_ttl: timedelta = timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES)
        self._refresh_ttl: timedelta = timedelta(days=config.REFRESH_TOKEN_EXPIRE_DAYS)
        self._clock = clock

    def _encode(self, subject_id: str, purpose: str, secret: str, ttl: timedelta) -> str:
        now: datetime = self._clock()
        payload: dict[str, Any] = {
            "sub": str(subject_id),
            "purpose": purpose,
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
            # 같은 초에 발급된 토큰도 서로 달라야 함 - ledger keys must stay unique
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, secret, algorithm=self._algorithm)

    def _decode(self, token: str, purpose: str, secret: str) -> TokenResult:
        try:
            # 서명 먼저 검증, 만료는 주입된 시계로 직접 확인
            # Signature first; expiry is checked below against the injected clock
            payload: dict[str, Any] = jwt.decode(
                token,
                secret,
                algorithms=[self._algorithm],
                options={"verify_exp": False, "verify_iat": False, "require": ["sub", "exp", "purpose"]},
            )
        except jwt.InvalidTokenError:
            return TokenResult(failure=TokenFailure.MALFORMED)

        if payload.get("purpose") != purpose:
            return TokenResult(failure=TokenFailure.MALFORMED)

        exp = payload.get("exp")
        subject = payload.get("sub")
        if not isinstance(exp, int) or not isinstance(subject, str) or not subject:
            return TokenResult(failure=TokenFailure.MALFORMED)

        if int(self._clock().timestamp()) >= exp:
            return TokenResult(failure=TokenFailure.EXPIRED)

        return TokenResult(subject_id=subject)

    def issue_access_token(self, subject_id: str) -> str:
        """액세스 토큰 발급 (Short-lived, purpose tag "accessApi")."""
        return self._encode(subject_id, ACCESS_PURPOSE, self._access_secret, self._access_ttl)

    def issue_refresh_token(self, subject_id: str) -> str:
        """리프레시 토큰 발급 (Longer-lived, purpose tag "refreshToken", refresh secret)."""
        return self._encode(subject_id, REFRESH_PURPOSE, self._refresh_secret, self._refresh_ttl)

    def verify_access_token(self, token: str) -> TokenResult:
        """액세스 토큰 검증 (Verify with the access secret and purpose tag)."""
        return self._decode(token, ACCESS_PURPOSE, self._access_secret)

    def verify_refresh_token(self, token: str) -> TokenResult:
        """리프레시 토큰 검증 (Verify with the refresh secret and purpose tag)."""
        return self._decode(token, REFRESH_PURPOSE, self._refresh_secret)


# 싱글턴 인스턴스 - Process-wide codec built from the startup settings
token_codec: TokenCodec = TokenCodec(settings)
