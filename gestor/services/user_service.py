"""사용자 서비스 - 사용자 조회, 수정, 삭제 비즈니스 로직.

User Service - Self-service and administrative user operations.
"""

from typing import Any, Sequence
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from gestor.logger import get_logger
from gestor.models.user import User
from gestor.repositories.user_repository import user_repository
from gestor.schemas.user import UserListResponse, UserPublic, UserUpdateRequest
from gestor.services.auth_service import to_user_public
from gestor.utils.exceptions import DuplicateFieldError, NotFoundError
from gestor.utils.password import hash_password_async

logger = get_logger(__name__)


class UserService:
    """사용자 관련 비즈니스 로직을 처리하는 서비스.

    Service handling user business logic.
    """

    async def _get_or_404(self, db: AsyncSession, user_id: UUID) -> User:
        user: User | None = await user_repository.get_by_id(db, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def get_user(self, db: AsyncSession, user_id: UUID) -> UserPublic:
        """사용자 단건 조회 (Single user by id, 404 when absent)."""
        return to_user_public(await self._get_or_404(db, user_id))

    async def list_users(self, db: AsyncSession, offset: int, limit: int) -> UserListResponse:
        """사용자 목록을 조회합니다.

        List users in creation order.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            offset: 건너뛸 사용자 수 (Users to skip)
            limit: 최대 반환 개수 (Maximum users to return)

        Returns:
            UserListResponse: 요청 창과 전체 개수 (Window echo plus total)
        """
        users: Sequence[User]
        users, total = await user_repository.list_users(db, offset=offset, limit=limit)
        return UserListResponse(
            limit=limit,
            offset=offset,
            total=total,
            users=[to_user_public(u) for u in users],
        )

    async def update_user(self, db: AsyncSession, user_id: UUID, data: UserUpdateRequest) -> UserPublic:
        """사용자 정보를 부분 수정합니다.

        Apply a partial update. Email and username stay unique; a new
        password is re-hashed before it is stored.

        Raises:
            NotFoundError: 사용자 없음 (User not found)
            DuplicateFieldError: 이메일 또는 사용자명 중복 (Email or username taken)
        """
        user: User = await self._get_or_404(db, user_id)
        changes: dict[str, Any] = data.model_dump(exclude_unset=True, exclude_none=True)

        if "email" in changes and await user_repository.email_exists(db, changes["email"], exclude_id=user_id):
            raise DuplicateFieldError("email")
        if "username" in changes and await user_repository.username_exists(
            db, changes["username"], exclude_id=user_id
        ):
            raise DuplicateFieldError("username")

        password: str | None = changes.pop("password", None)
        if password is not None:
            changes["password_hash"] = await hash_password_async(password)

        try:
            user = await user_repository.update_fields(db, user, changes)
        except IntegrityError:
            await db.rollback()
            raise DuplicateFieldError("email" if "email" in changes else "username")

        # 비밀번호 값은 로그에 남기지 않음 - field names only
        logger.info("user_updated", user_id=str(user_id), fields=sorted(changes))
        return to_user_public(user)

    async def delete_user(self, db: AsyncSession, user_id: UUID) -> None:
        """사용자와 원장 항목을 삭제합니다 (Delete the user and its ledger entries; 404 when absent)."""
        if not await user_repository.delete_user(db, user_id):
            raise NotFoundError("User not found")
        logger.info("user_deleted", user_id=str(user_id))


# 싱글턴 인스턴스 - Singleton instance
user_service: UserService = UserService()
