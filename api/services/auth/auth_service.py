from typing import Optional, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from sqlalchemy.exc import SQLAlchemyError

from models.database.user import User
from core.exceptions import ServiceError, NotFoundError
from services.dataclasses.auth import LoginResult, INVALID_CREDENTIALS_MESSAGE
from utils.jwt_utils import JWTManager
from utils.logging import get_logger
from utils.password_utils import verify_password, dummy_verify

logger = get_logger(__name__)


class AuthService:
    """
    Authentication service - handles login and profile lookup
    - Credential check against username or email
    - Access token issuance
    Failed logins never reveal whether the account exists.
    """
    
    def __init__(self, db: AsyncSession):
        self.db = db
    
    async def authenticate_user(self, identifier: str, password: str) -> Optional[User]:
        """
        Authenticate user with username or email and password
        Only checks authentication, not authorization
        """
        identifier = (identifier or "").strip()
        try:
            query = select(User).where(
                or_(User.username == identifier, User.email == identifier),
                User.is_active == True
            )
            result = await self.db.execute(query)
            user = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Authentication lookup failed: {e}")
            raise ServiceError()

        if not user:
            dummy_verify()
            logger.warning(f"Authentication failed: user not found or inactive - {identifier}")
            return None

        if not verify_password(password or "", user.hashed_password):
            logger.warning(f"Authentication failed: invalid password - {identifier}")
            return None

        logger.info(f"User authenticated successfully: {user.username}")
        return user

    async def login(self, identifier: str, password: str) -> LoginResult:
        user = await self.authenticate_user(identifier, password)
        if not user:
            return LoginResult(success=False, message=INVALID_CREDENTIALS_MESSAGE)

        user_data = user.to_public_dict()
        token = JWTManager.create_access_token(user_data)
        return LoginResult(success=True, token=token, user=user_data)

    async def get_user_profile(self, user_id: int) -> Dict[str, Any]:
        try:
            result = await self.db.execute(select(User).where(User.id == user_id))
            user = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Profile lookup failed for user {user_id}: {e}")
            raise ServiceError()

        if not user:
            raise NotFoundError("User not found")
        return user.to_public_dict()
