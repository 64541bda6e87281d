"""API 라우터 패키지 - 모든 엔드포인트 통합.

API router package - Aggregates every endpoint under one router that
main.py mounts at API_PREFIX.
"""

from datetime import datetime, timezone

from fastapi import APIRouter

from gestor import __version__
from gestor.api.auth import router as auth_router
from gestor.api.users import router as users_router

api_router: APIRouter = APIRouter()


@api_router.get("/", tags=["Root"])
async def api_root() -> dict[str, str]:
    """API 루트 - 상태와 버전 (API status and version)."""
    return {
        "message": "API is live",
        "status": "ok",
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


api_router.include_router(auth_router, prefix="/auth", tags=["Auth"])
api_router.include_router(users_router, prefix="/users", tags=["Users"])
