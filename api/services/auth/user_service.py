"""
Staff account management
"""
import math
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from common.types import UserRole
from core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ServiceError,
    ValidationError,
)
from models.database.auth import PasswordResetToken
from models.database.contact import Contact
from models.database.user import User
from utils.logging import get_logger
from utils.password_utils import hash_password

logger = get_logger(__name__)

SELF_SERVICE_FIELDS = {"username", "email", "password"}


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _ensure_unique(self, username: Optional[str], email: Optional[str], exclude_id: Optional[int] = None) -> None:
        conditions = []
        if username:
            conditions.append(User.username == username)
        if email:
            conditions.append(User.email == email)
        if not conditions:
            return

        query = select(User.id).where(or_(*conditions))
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        result = await self.db.execute(query)
        if result.first() is not None:
            raise ConflictError("Username or email already exists")

    async def create_user(
        self,
        username: str,
        email: str,
        password: str,
        role: str = UserRole.AGENT.value,
        is_active: bool = True,
    ) -> User:
        try:
            await self._ensure_unique(username, email)
            user = User(
                username=username,
                email=email,
                hashed_password=hash_password(password),
                role=role,
                is_active=is_active,
            )
            self.db.add(user)
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("Username or email already exists")
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Create user failed: {e}")
            raise ServiceError()

        logger.info(f"User created: {user.username} ({user.role})")
        return user

    async def list_users(
        self,
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
        role: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> Tuple[List[User], Dict[str, int]]:
        query = select(User)
        if search:
            search_term = f"%{search}%"
            query = query.where(or_(User.username.ilike(search_term), User.email.ilike(search_term)))
        if role:
            query = query.where(User.role == role)
        if is_active is not None:
            query = query.where(User.is_active == is_active)

        try:
            total = await self.db.scalar(select(func.count()).select_from(query.subquery()))
            result = await self.db.execute(
                query.order_by(User.created_at.desc(), User.id.desc())
                .offset((page - 1) * limit)
                .limit(limit)
            )
            users = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"List users failed: {e}")
            raise ServiceError()

        total = total or 0
        pagination = {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": math.ceil(total / limit) if limit else 0,
        }
        return users, pagination

    async def get_user(self, user_id: int) -> User:
        try:
            result = await self.db.execute(select(User).where(User.id == user_id))
            user = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Get user {user_id} failed: {e}")
            raise ServiceError()

        if not user:
            raise NotFoundError("User not found")
        return user

    async def update_user(self, user_id: int, updates: Dict[str, Any], actor: Dict[str, Any]) -> User:
        """
        Apply a partial update.
        Admins may change any field; other accounts may only change their own
        username, email and password.
        """
        updates = {key: value for key, value in updates.items() if value is not None}
        if not updates:
            raise ValidationError("At least one field must be provided")

        is_admin = actor.get("role") == UserRole.ADMIN.value
        if not is_admin:
            if actor.get("id") != user_id:
                raise AuthorizationError()
            if set(updates) - SELF_SERVICE_FIELDS:
                raise AuthorizationError("Only administrators can change role or active status")

        user = await self.get_user(user_id)
        try:
            await self._ensure_unique(updates.get("username"), updates.get("email"), exclude_id=user_id)

            password = updates.pop("password", None)
            if password:
                user.hashed_password = hash_password(password)
            for field, value in updates.items():
                setattr(user, field, value)

            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("Username or email already exists")
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Update user {user_id} failed: {e}")
            raise ServiceError()

        logger.info(f"User {user_id} updated by {actor.get('id')}: {sorted(updates) + (['password'] if password else [])}")
        return user

    async def delete_user(self, user_id: int, actor_id: int) -> None:
        if user_id == actor_id:
            raise ValidationError("You cannot delete your own account")

        user = await self.get_user(user_id)
        try:
            await self.db.execute(
                update(Contact)
                .where(Contact.assigned_to == user_id)
                .values(assigned_to=None)
                .execution_options(synchronize_session=False)
            )
            await self.db.execute(
                delete(PasswordResetToken)
                .where(PasswordResetToken.user_id == user_id)
                .execution_options(synchronize_session=False)
            )
            await self.db.delete(user)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Delete user {user_id} failed: {e}")
            raise ServiceError()

        logger.info(f"User {user_id} deleted by {actor_id}")
