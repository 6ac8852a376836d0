"""User management endpoints"""
from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from config.database import get_db
from config.settings import get_settings
from api.v1.middleware.auth_middleware import AdminOnly, ManagerOrAdmin, AuthenticatedUser
from services.auth.user_service import UserService
from models.schemas.request.user import UserCreateRequest, UserUpdateRequest
from models.schemas.responses.auth import OperationResponse
from models.schemas.responses.user import UserResponse, UserListResponse

router = APIRouter()
settings = get_settings()


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED, summary="Create user")
async def create_user(
    payload: UserCreateRequest,
    db: AsyncSession = Depends(get_db),
    user_ctx: dict = AdminOnly
) -> UserResponse:
    user = await UserService(db).create_user(
        username=payload.username,
        email=payload.email,
        password=payload.password,
        role=payload.role,
        is_active=payload.is_active,
    )
    return UserResponse(message="User created successfully", data=user.to_public_dict())


@router.get("", response_model=UserListResponse, summary="List users")
async def list_users(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Items per page"),
    search: Optional[str] = Query(None, description="Search by username or email"),
    role: Optional[str] = Query(None, description="Filter by role"),
    is_active: Optional[bool] = Query(None, description="Filter by active status"),
    db: AsyncSession = Depends(get_db),
    user_ctx: dict = ManagerOrAdmin
) -> UserListResponse:
    """List users with optional filtering and search"""
    users, pagination = await UserService(db).list_users(
        page=page, limit=limit, search=search, role=role, is_active=is_active
    )
    return UserListResponse(
        data=[user.to_public_dict() for user in users],
        pagination=pagination,
    )


@router.get("/{user_id}", response_model=UserResponse, summary="Get user details")
async def get_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    user_ctx: dict = ManagerOrAdmin
) -> UserResponse:
    user = await UserService(db).get_user(user_id)
    return UserResponse(message="User retrieved successfully", data=user.to_public_dict())


@router.put("/{user_id}", response_model=UserResponse, summary="Update user")
async def update_user(
    user_id: int,
    payload: UserUpdateRequest,
    db: AsyncSession = Depends(get_db),
    user_ctx: Dict[str, Any] = AuthenticatedUser
) -> UserResponse:
    """Admins update any account; other roles only their own credentials"""
    user = await UserService(db).update_user(user_id, payload.model_dump(exclude_unset=True), user_ctx)
    return UserResponse(message="User updated successfully", data=user.to_public_dict())


@router.delete("/{user_id}", response_model=OperationResponse, summary="Delete user")
async def delete_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    user_ctx: dict = AdminOnly
) -> OperationResponse:
    await UserService(db).delete_user(user_id, actor_id=user_ctx["id"])
    return OperationResponse(success=True, message="User deleted successfully")
