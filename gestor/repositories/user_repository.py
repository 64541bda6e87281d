"""사용자 레포지토리 - 자격 증명 저장소 쿼리.

User Repository - Credential store queries.
Extends BaseRepository with the email lookup, uniqueness checks on email
and username, and the single-column role read used by the authorization gate.
"""

from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import Select, delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from gestor.models.token import RefreshToken
from gestor.models.user import User, UserRole
from gestor.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """사용자 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the users table.
    """

    def __init__(self) -> None:
        super().__init__(User)

    async def get_by_email(self, db: AsyncSession, email: str) -> User | None:
        """이메일로 사용자를 조회합니다 (Retrieve a user by email, case-insensitive input)."""
        query: Select = select(User).where(User.email == email.strip().lower())
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def email_exists(self, db: AsyncSession, email: str, exclude_id: UUID | None = None) -> bool:
        """이메일 중복 여부 확인.

        Check whether an email is already taken, optionally ignoring one user
        (the user being updated).
        """
        query: Select = select(User.id).where(User.email == email.strip().lower())
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        result = await db.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    async def username_exists(self, db: AsyncSession, username: str, exclude_id: UUID | None = None) -> bool:
        query: Select = select(User.id).where(User.username == username)
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        result = await db.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    async def get_role(self, db: AsyncSession, user_id: UUID) -> UserRole | None:
        """사용자의 현재 역할만 조회합니다.

        Read only the user's current role. Returns None when the user does not
        exist. Role can change after a token is issued, so it is always read
        from the store rather than trusted from the token.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_id: 사용자 UUID (User identifier from the access token)

        Returns:
            UserRole | None: 현재 역할 또는 None (Current role or None)
        """
        result = await db.execute(select(User.role).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def list_users(
        self,
        db: AsyncSession,
        offset: int,
        limit: int,
    ) -> tuple[Sequence[User], int]:
        """가입 순서대로 사용자 목록 조회 (Users ordered by creation time)."""
        return await self.get_page(db, offset=offset, limit=limit, order_by=User.created_at)

    async def update_fields(self, db: AsyncSession, user: User, fields: dict[str, Any]) -> User:
        """지정된 필드만 갱신합니다.

        Apply a partial update to a user and flush.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user: 대상 사용자 (User to update)
            fields: 변경할 컬럼과 값 (Column → new value)

        Returns:
            User: 갱신된 사용자 (Updated user)
        """
        if fields:
            await db.execute(update(User).where(User.id == user.id).values(**fields))
            await db.flush()
            await db.refresh(user)
        return user

    async def delete_user(self, db: AsyncSession, user_id: UUID) -> bool:
        """사용자와 해당 리프레시 토큰 원장 항목을 삭제합니다.

        Delete a user together with its refresh token ledger entries, so no
        session of the removed account can be refreshed afterwards.

        Returns:
            bool: 사용자 삭제 여부 (Whether the user row existed)
        """
        await db.execute(delete(RefreshToken).where(RefreshToken.user_id == user_id))
        return await self.delete_by_id(db, user_id)


# 싱글턴 인스턴스 - Singleton instance
user_repository: UserRepository = UserRepository()
