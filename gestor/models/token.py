"""리프레시 토큰 모델 - 리프레시 토큰 원장.

Refresh Token model - The refresh token ledger.
The signed token string itself is the lookup key. An entry is created at
login/register and deleted at logout; it is never updated. There is no
expiry column: expired-but-undeleted entries are rejected by signature
expiry at verification time.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gestor.database import Base


class RefreshToken(Base):
    """리프레시 토큰 테이블.

    Refresh token ledger table. One user may own many entries (one per
    session/device).

    Attributes:
        id: 고유 식별자 (Primary key UUID)
        token: JWT 리프레시 토큰 문자열 (Signed refresh token, unique lookup key)
        user_id: 소유 사용자 ID (Owner user UUID)
        created_at: 생성 일시 (Creation timestamp)
    """

    __tablename__ = "refresh_tokens"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    token: Mapped[str] = mapped_column(String(512), unique=True, nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    user = relationship("User", back_populates="refresh_tokens")
