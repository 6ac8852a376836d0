import asyncio
from typing import Optional

from fastapi import BackgroundTasks
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, or_
from sqlalchemy.exc import SQLAlchemyError

from models.database.user import User
from models.database.auth import PasswordResetToken
from core.exceptions import ServiceError
from services.dataclasses.auth import (
    OperationOutcome,
    ResetRecipient,
    TokenValidation,
    FORGOT_PASSWORD_MESSAGE,
    INACTIVE_USER_MESSAGE,
    INVALID_RESET_TOKEN_MESSAGE,
    PASSWORD_RESET_MESSAGE,
)
from services.notifications.dispatcher import NotificationDispatcher, get_notification_dispatcher
from utils.password_utils import hash_password, generate_reset_token, hash_token
from utils.datetime_utils import DateTimeManager
from utils.logging import get_logger
from config.settings import get_settings


logger = get_logger(__name__)


class ResetService:
    """
    Password recovery: issue single-use reset tokens and redeem them.
    Only the SHA-256 digest of a token is stored. Redemption consumes the
    token with a conditional update so two concurrent redemptions cannot
    both succeed.
    """

    def __init__(self, db: AsyncSession, dispatcher: Optional[NotificationDispatcher] = None):
        self.db = db
        self.dispatcher = dispatcher or get_notification_dispatcher()
        self.settings = get_settings()

    async def request_password_reset(
        self,
        identifier: str,
        background_tasks: Optional[BackgroundTasks] = None
    ) -> OperationOutcome:
        """
        Request password reset for user by username or email.
        When `background_tasks` is given the notification is sent after the
        response, so known and unknown accounts answer in the same time.
        """
        identifier = (identifier or "").strip()
        try:
            result = await self.db.execute(
                select(User).where(
                    or_(User.username == identifier, User.email == identifier),
                    User.is_active == True
                )
            )
            user = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Password reset lookup failed: {e}")
            raise ServiceError()

        if not user:
            logger.info("Password reset requested for unknown or inactive account")
            return OperationOutcome(success=True, message=FORGOT_PASSWORD_MESSAGE)

        recipient = ResetRecipient(user_id=user.id, username=user.username, email=user.email)
        raw_token = await self.create_reset_token(user.id)
        if background_tasks is not None:
            background_tasks.add_task(self._dispatch_reset_notification, recipient, raw_token)
        else:
            await self._dispatch_reset_notification(recipient, raw_token)
        return OperationOutcome(success=True, message=FORGOT_PASSWORD_MESSAGE)

    async def create_reset_token(self, user_id: int) -> str:
        """Invalidate outstanding tokens of the account and persist a fresh one"""
        raw_token = generate_reset_token()
        try:
            await self.db.execute(
                update(PasswordResetToken)
                .where(
                    PasswordResetToken.user_id == user_id,
                    PasswordResetToken.used == False
                )
                .values(used=True)
                .execution_options(synchronize_session=False)
            )
            self.db.add(PasswordResetToken(
                user_id=user_id,
                token_hash=hash_token(raw_token),
                used=False,
                expires_at=DateTimeManager.expires_in(self.settings.RESET_TOKEN_TTL_MINUTES)
            ))
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Create reset token failed for user {user_id}: {e}")
            raise ServiceError()

        logger.info(f"Reset token issued for user {user_id}")
        return raw_token

    async def _dispatch_reset_notification(self, recipient: ResetRecipient, raw_token: str) -> None:
        try:
            await asyncio.wait_for(
                self.dispatcher.send_password_reset(recipient, raw_token),
                timeout=self.settings.NOTIFICATION_TIMEOUT_SECONDS
            )
        except asyncio.TimeoutError:
            logger.warning(f"Reset notification for user {recipient.user_id} timed out")
        except Exception as e:
            logger.error(f"Reset notification for user {recipient.user_id} failed: {e}")

    async def _find_redeemable_token(self, raw_token: str) -> Optional[PasswordResetToken]:
        if not raw_token:
            return None
        try:
            result = await self.db.execute(
                select(PasswordResetToken).where(
                    PasswordResetToken.token_hash == hash_token(raw_token),
                    PasswordResetToken.used == False,
                    PasswordResetToken.expires_at > DateTimeManager._now()
                )
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Reset token lookup failed: {e}")
            raise ServiceError()

    async def validate_reset_token(self, raw_token: str) -> TokenValidation:
        """Read-only probe: never consumes the token"""
        token = await self._find_redeemable_token(raw_token)
        if not token:
            return TokenValidation(valid=False, message=INVALID_RESET_TOKEN_MESSAGE)
        return TokenValidation(valid=True)

    async def reset_password(self, raw_token: str, new_password: str) -> OperationOutcome:
        min_length = self.settings.PASSWORD_MIN_LENGTH
        if not new_password or len(new_password) < min_length:
            return OperationOutcome(
                success=False,
                message=f"Password must be at least {min_length} characters long"
            )

        token = await self._find_redeemable_token(raw_token)
        if not token:
            return OperationOutcome(success=False, message=INVALID_RESET_TOKEN_MESSAGE)
        token_id, owner_id = token.id, token.user_id

        try:
            user_result = await self.db.execute(
                select(User).where(User.id == owner_id, User.is_active == True)
            )
            user = user_result.scalar_one_or_none()
            if not user:
                return OperationOutcome(success=False, message=INACTIVE_USER_MESSAGE)

            new_hash = hash_password(new_password)

            consumed = await self.db.execute(
                update(PasswordResetToken)
                .where(
                    PasswordResetToken.id == token_id,
                    PasswordResetToken.used == False,
                    PasswordResetToken.expires_at > DateTimeManager._now()
                )
                .values(used=True)
                .execution_options(synchronize_session=False)
            )
            if consumed.rowcount != 1:
                await self.db.rollback()
                logger.warning(f"Reset token {token_id} was redeemed concurrently")
                return OperationOutcome(success=False, message=INVALID_RESET_TOKEN_MESSAGE)

            user.hashed_password = new_hash
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Reset password failed: {e}")
            raise ServiceError()

        logger.info(f"Password reset completed for user {owner_id}")
        return OperationOutcome(success=True, message=PASSWORD_RESET_MESSAGE)
