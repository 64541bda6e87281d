"""인증 라우터 - 회원가입, 로그인, 토큰 갱신, 로그아웃.

Auth Router - Register, login, access token refresh, and logout.
The refresh token travels only in the `refreshToken` cookie: HTTP-only,
secure in production, SameSite=strict.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Cookie, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from gestor.api.deps import authenticate
from gestor.config import Settings, get_settings
from gestor.database import get_db
from gestor.schemas.auth import AuthResponse, LoginRequest, RefreshResponse, RegisterRequest
from gestor.schemas.error import ErrorResponse
from gestor.services.auth_service import IssuedSession, auth_service

REFRESH_COOKIE = "refreshToken"

router: APIRouter = APIRouter()


def _cookie_options(config: Settings) -> dict[str, object]:
    # set과 clear에 동일한 속성 사용 (Same attributes for setting and clearing)
    return {
        "httponly": True,
        "secure": config.is_production,
        "samesite": "strict",
    }


def _set_refresh_cookie(response: Response, refresh_token: str, config: Settings) -> None:
    response.set_cookie(
        REFRESH_COOKIE,
        refresh_token,
        max_age=config.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        **_cookie_options(config),
    )


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={403: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def register(
    data: RegisterRequest,
    response: Response,
    db: Annotated[AsyncSession, Depends(get_db)],
    config: Annotated[Settings, Depends(get_settings)],
) -> AuthResponse:
    """회원가입 - 사용자 생성 후 세션 발급.

    Create a user and open a session: access token in the body, refresh
    token in the cookie.
    """
    session: IssuedSession = await auth_service.register(db, data)
    await db.commit()
    _set_refresh_cookie(response, session.refresh_token, config)
    return session.body


@router.post(
    "/login",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def login(
    data: LoginRequest,
    response: Response,
    db: Annotated[AsyncSession, Depends(get_db)],
    config: Annotated[Settings, Depends(get_settings)],
) -> AuthResponse:
    """로그인 - 새 세션 발급 (Open a new session; earlier sessions stay active)."""
    session: IssuedSession = await auth_service.login(db, data)
    await db.commit()
    _set_refresh_cookie(response, session.refresh_token, config)
    return session.body


@router.post(
    "/refresh-token",
    response_model=RefreshResponse,
    responses={401: {"model": ErrorResponse}},
)
async def refresh_token(
    db: Annotated[AsyncSession, Depends(get_db)],
    refresh_token: Annotated[str | None, Cookie(alias=REFRESH_COOKIE)] = None,
) -> RefreshResponse:
    """토큰 갱신 - 리프레시 토큰 쿠키로 새 액세스 토큰 발급.

    Exchange the refresh token cookie for a new access token. The refresh
    token itself is not rotated.
    """
    return await auth_service.refresh_access_token(db, refresh_token)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    db: Annotated[AsyncSession, Depends(get_db)],
    user_id: Annotated[UUID, Depends(authenticate)],
    config: Annotated[Settings, Depends(get_settings)],
    refresh_token: Annotated[str | None, Cookie(alias=REFRESH_COOKIE)] = None,
) -> Response:
    """로그아웃 - 리프레시 토큰 폐기 및 쿠키 삭제.

    Revoke the presented refresh token and clear the cookie.
    """
    await auth_service.logout(db, refresh_token, user_id)
    await db.commit()
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(REFRESH_COOKIE, **_cookie_options(config))
    return response
