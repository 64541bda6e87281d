"""사용자 SQLAlchemy ORM 모델 정의.

User SQLAlchemy ORM model definition.
Role is a closed enumeration with two variants; authorization is a
set-membership check over UserRole, never a free-form string comparison.

Tables:
    - users: 사용자 계정 (User accounts, credential store)
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Enum, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gestor.database import Base


class UserRole(str, enum.Enum):
    """사용자 역할 (User role)."""

    ADMIN = "admin"
    USER = "user"


class User(Base):
    """사용자 모델 - 시스템 사용자 계정 정보.

    User model - System user account information.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier, token subject)
        username: 사용자명 (Generated at registration, globally unique)
        email: 이메일 (Login identifier, globally unique)
        password_hash: bcrypt 해시된 비밀번호 (bcrypt-hashed password, never returned on read paths)
        role: 역할 (admin | user)
        first_name: 이름 (Optional first name)
        last_name: 성 (Optional last name)
        created_at: 생성 일시 UTC (Creation timestamp)
        updated_at: 수정 일시 UTC (Last update timestamp)

    Relationships:
        refresh_tokens: 리프레시 토큰 원장 항목 (Ledger entries, removed with the user)
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    username: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    # 비밀번호 해시 - 평문 저장 금지 (never store plaintext)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name="user_role", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=UserRole.USER,
    )
    first_name: Mapped[str | None] = mapped_column(String(20), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(20), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # 관계 - Relationships
    refresh_tokens = relationship(
        "RefreshToken",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
