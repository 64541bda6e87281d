"""사용자 라우터 - 현재 사용자 셀프 서비스 및 관리자 사용자 관리.

Users Router - Current-user self-service (any role) and user
administration (admin only).
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from gestor.api.deps import PageParams, require_admin, require_any_role
from gestor.database import get_db
from gestor.schemas.error import ErrorResponse
from gestor.schemas.user import UserListResponse, UserResponse, UserUpdateRequest
from gestor.services.user_service import user_service

router: APIRouter = APIRouter(
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)


@router.get("/current", response_model=UserResponse)
async def get_current_user(
    db: Annotated[AsyncSession, Depends(get_db)],
    user_id: Annotated[UUID, Depends(require_any_role)],
) -> UserResponse:
    """현재 사용자 프로필 조회 (Profile of the authenticated user)."""
    return UserResponse(user=await user_service.get_user(db, user_id))


@router.put("/current", response_model=UserResponse, responses={409: {"model": ErrorResponse}})
async def update_current_user(
    data: UserUpdateRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    user_id: Annotated[UUID, Depends(require_any_role)],
) -> UserResponse:
    """현재 사용자 정보 수정.

    Partially update the authenticated user.
    """
    user = await user_service.update_user(db, user_id, data)
    await db.commit()
    return UserResponse(user=user)


@router.delete("/current", status_code=status.HTTP_204_NO_CONTENT)
async def delete_current_user(
    db: Annotated[AsyncSession, Depends(get_db)],
    user_id: Annotated[UUID, Depends(require_any_role)],
) -> Response:
    """현재 사용자 계정 삭제 - 원장 항목도 함께 삭제.

    Delete the authenticated user's account together with its refresh
    token ledger entries.
    """
    await user_service.delete_user(db, user_id)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("", response_model=UserListResponse)
async def list_users(
    db: Annotated[AsyncSession, Depends(get_db)],
    _: Annotated[UUID, Depends(require_admin)],
    page: Annotated[PageParams, Depends()],
) -> UserListResponse:
    """사용자 목록 조회 - 관리자 전용 (Admin only; paged with limit/offset)."""
    return await user_service.list_users(db, offset=page.offset, limit=page.limit)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: Annotated[UUID, Depends(require_admin)],
) -> UserResponse:
    """사용자 단건 조회 - 관리자 전용 (Admin only)."""
    return UserResponse(user=await user_service.get_user(db, user_id))


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: Annotated[UUID, Depends(require_admin)],
) -> Response:
    """사용자 삭제 - 관리자 전용 (Admin only; removes the user's ledger entries too)."""
    await user_service.delete_user(db, user_id)
    await db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
