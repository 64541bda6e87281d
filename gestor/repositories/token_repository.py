"""리프레시 토큰 원장 레포지토리.

Refresh Token Ledger repository.
The ledger is the authoritative record of refresh tokens that may still be
exchanged for access tokens. A refresh token absent from the ledger is
never honored, however valid its signature; deleting the entry is how a
session is revoked. All operations are single-row statements.
"""

from uuid import UUID

from sqlalchemy import Select, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gestor.models.token import RefreshToken


class RefreshTokenRepository:
    """리프레시 토큰 원장에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling the refresh token ledger.
    """

    async def record(
        self,
        db: AsyncSession,
        token: str,
        user_id: UUID,
    ) -> RefreshToken:
        """새 리프레시 토큰 항목을 기록합니다.

        Insert a ledger entry. Other active entries for the same user are
        left alone (one entry per session/device).

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            token: 서명된 리프레시 토큰 문자열 (Signed refresh token string)
            user_id: 토큰 소유자 사용자 ID (Owner user UUID)

        Returns:
            RefreshToken: 생성된 원장 항목 (Created ledger entry)
        """
        entry: RefreshToken = RefreshToken(token=token, user_id=user_id)
        db.add(entry)
        await db.flush()
        return entry

    async def exists(self, db: AsyncSession, token: str) -> bool:
        """원장에 토큰이 존재하는지 확인합니다 (Whether the token is in the ledger)."""
        query: Select = select(RefreshToken.id).where(RefreshToken.token == token).limit(1)
        result = await db.execute(query)
        return result.scalar_one_or_none() is not None

    async def revoke(self, db: AsyncSession, token: str) -> bool:
        """토큰 문자열과 일치하는 항목을 삭제합니다.

        Delete the entry matching the token string. Idempotent: revoking a
        token that is not in the ledger is not an error.

        Returns:
            bool: 실제로 삭제되었는지 여부 (Whether an entry was removed)
        """
        result = await db.execute(delete(RefreshToken).where(RefreshToken.token == token))
        await db.flush()
        return (result.rowcount or 0) > 0

    async def count_for_user(self, db: AsyncSession, user_id: UUID) -> int:
        """사용자의 원장 항목 수 (Number of ledger entries owned by the user)."""
        result = await db.execute(
            select(func.count()).select_from(RefreshToken).where(RefreshToken.user_id == user_id)
        )
        return result.scalar() or 0


# 싱글턴 인스턴스 - Singleton instance
refresh_token_repository: RefreshTokenRepository = RefreshTokenRepository()
