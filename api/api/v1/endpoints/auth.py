from typing import Any, Dict

from fastapi import APIRouter, BackgroundTasks, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from config.database import get_db
from core.exceptions import AuthenticationError, ValidationError
from services.auth.auth_service import AuthService
from services.send_mail.reset_service import ResetService
from services.notifications.dispatcher import NotificationDispatcher, get_notification_dispatcher
from api.v1.middleware.auth_middleware import AuthenticatedUser
from models.schemas.request.auth import (
    LoginRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
)
from models.schemas.responses.auth import (
    LoginResponse,
    OperationResponse,
    ProfileResponse,
    TokenValidationResponse,
)
from utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


@router.post(
    "/login",
    response_model=LoginResponse,
    operation_id="auth_login",
    summary="User login",
)
async def login(payload: LoginRequest, db: AsyncSession = Depends(get_db)):
    result = await AuthService(db).login(payload.username, payload.password)
    if not result.success:
        raise AuthenticationError(result.message, error_code="INVALID_CREDENTIALS")

    return LoginResponse(token=result.token, user=result.user)


@router.post(
    "/logout",
    response_model=OperationResponse,
    operation_id="auth_logout",
    summary="Acknowledge logout; the client discards its token",
)
async def logout(user_ctx: Dict[str, Any] = AuthenticatedUser):
    logger.info(f"User {user_ctx['id']} logged out")
    return OperationResponse(success=True, message="Logged out successfully")


@router.get(
    "/me",
    response_model=ProfileResponse,
    operation_id="auth_me",
    summary="Current user profile",
)
async def me(user_ctx: Dict[str, Any] = AuthenticatedUser, db: AsyncSession = Depends(get_db)):
    user = await AuthService(db).get_user_profile(user_ctx["id"])
    return ProfileResponse(user=user)


@router.post(
    "/forgot-password",
    response_model=OperationResponse,
    operation_id="auth_forgot_password",
    summary="Send a password reset link if the account exists",
)
async def forgot_password(
    payload: ForgotPasswordRequest,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    outcome = await ResetService(db, dispatcher).request_password_reset(
        payload.identifier, background_tasks
    )
    return OperationResponse(success=outcome.success, message=outcome.message)


@router.post(
    "/reset-password",
    response_model=OperationResponse,
    operation_id="auth_reset_password",
    summary="Redeem a reset token and set a new password",
)
async def reset_password(
    payload: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    outcome = await ResetService(db, dispatcher).reset_password(payload.token, payload.new_password)
    if not outcome.success:
        raise ValidationError(outcome.message)
    return OperationResponse(success=True, message=outcome.message)


@router.get(
    "/validate-reset-token/{token}",
    response_model=TokenValidationResponse,
    operation_id="auth_validate_reset_token",
    summary="Check a reset token without consuming it",
)
async def validate_reset_token(
    token: str,
    db: AsyncSession = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    validation = await ResetService(db, dispatcher).validate_reset_token(token)
    if not validation.valid:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=TokenValidationResponse(valid=False, message=validation.message).model_dump(),
        )
    return TokenValidationResponse(valid=True)
