from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_

from models.database.user import User
from utils.password_utils import hash_password
from utils.logging import get_logger
from common.types import UserRole
from config.settings import Settings, get_settings

logger = get_logger(__name__)


async def seed_initial_admin(db: AsyncSession, settings: Optional[Settings] = None) -> Optional[int]:
    """
    Seed the first ADMIN account if not exists.
    Uses settings to avoid hard-code:
      ADMIN_USERNAME, ADMIN_EMAIL, ADMIN_PASSWORD
    Returns user id if created or found.
    """
    settings = settings or get_settings()
    username = settings.ADMIN_USERNAME
    email = settings.ADMIN_EMAIL
    password = settings.ADMIN_PASSWORD

    if not (username and email and password):
        logger.info("Admin seed skipped: missing ADMIN_* settings")
        return None

    result = await db.execute(
        select(User).where(or_(User.username == username, User.email == email))
    )
    user = result.scalars().first()

    if user:
        logger.info("Admin already exists; skipping creation")
        return user.id

    user = User(
        username=username,
        email=email,
        hashed_password=hash_password(password),
        role=UserRole.ADMIN.value,
        is_active=True,
    )
    db.add(user)
    await db.flush()
    await db.commit()

    logger.info(f"Admin account created: {username}")
    return user.id
