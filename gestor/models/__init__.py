"""SQLAlchemy ORM 모델 패키지 - 모든 도메인 모델의 중앙 임포트 지점.

SQLAlchemy ORM models package - Central import point for all domain models.
Importing from this package registers every model with the SQLAlchemy
metadata, which Alembic and relationship resolution rely on.

Modules:
    user: 사용자 및 역할 열거형 (User and UserRole)
    token: 리프레시 토큰 원장 (Refresh token ledger)
"""

from gestor.models.user import User, UserRole
from gestor.models.token import RefreshToken

__all__ = ["User", "UserRole", "RefreshToken"]
