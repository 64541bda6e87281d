"""기본 CRUD 레포지토리 - 모든 레포지토리의 부모 클래스.

Base CRUD Repository - Parent class for domain repositories.
Provides generic Create, Read, Delete operations keyed by primary key.

Usage:
    class UserRepository(BaseRepository[User]):
        def __init__(self) -> None:
            super().__init__(User)
"""

from typing import Generic, Sequence, TypeVar
from uuid import UUID

from sqlalchemy import Select, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from gestor.database import Base
from gestor.utils.pagination import paginate

# 제네릭 타입 변수 - SQLAlchemy 모델을 나타냄
# Generic type variable representing a SQLAlchemy model
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """제네릭 CRUD 레포지토리.

    Generic CRUD repository providing common database operations.

    Attributes:
        model: SQLAlchemy 모델 클래스 (The SQLAlchemy model class)
    """

    def __init__(self, model: type[ModelType]) -> None:
        self.model: type[ModelType] = model

    async def get_by_id(
        self,
        db: AsyncSession,
        record_id: UUID,
    ) -> ModelType | None:
        """ID로 단일 레코드를 조회합니다.

        Retrieve a single record by its UUID.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            record_id: 조회할 레코드의 UUID (UUID of the record to retrieve)

        Returns:
            ModelType | None: 조회된 레코드 또는 None (Found record or None)
        """
        query: Select = select(self.model).where(self.model.id == record_id)
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_page(
        self,
        db: AsyncSession,
        offset: int = 0,
        limit: int = 20,
        order_by=None,
    ) -> tuple[Sequence[ModelType], int]:
        """오프셋/리밋 기반 레코드 목록과 전체 개수를 조회합니다.

        Retrieve one window of records plus the total count.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            offset: 건너뛸 레코드 수 (Records to skip)
            limit: 최대 반환 개수 (Maximum records to return)
            order_by: 정렬 기준 컬럼 (Column to order by)

        Returns:
            tuple[Sequence[ModelType], int]: (레코드 목록, 전체 개수)
        """
        query: Select = select(self.model)
        if order_by is not None:
            query = query.order_by(order_by)
        return await paginate(db, query, offset=offset, limit=limit)

    async def create(self, db: AsyncSession, obj: ModelType) -> ModelType:
        """레코드를 추가하고 flush 후 반환합니다.

        Add a record, flush so generated values are populated, and return it.
        """
        db.add(obj)
        await db.flush()
        await db.refresh(obj)
        return obj

    async def delete_by_id(self, db: AsyncSession, record_id: UUID) -> bool:
        """ID로 레코드를 삭제합니다. 삭제 여부 반환.

        Delete a record by primary key. Returns whether a row was deleted.
        """
        result = await db.execute(delete(self.model).where(self.model.id == record_id))
        await db.flush()
        return (result.rowcount or 0) > 0
