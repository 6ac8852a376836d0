from sqlalchemy import Column, String, Boolean, DateTime, Integer, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import text
from models.database.base import BaseModel


class PasswordResetToken(BaseModel):
    """
    Single-use password recovery tokens
    - token_hash: SHA-256 digest of the opaque token sent to the user
    - used, expires_at: lifecycle control, checked at redemption time
    """
    __tablename__ = "password_reset_tokens"

    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    token_hash = Column(String(128), nullable=False, unique=True)
    used = Column(Boolean, nullable=False, default=False, server_default=text("FALSE"))
    expires_at = Column(DateTime(timezone=True), nullable=False)

    user = relationship("User", back_populates="reset_tokens")

    __table_args__ = (
        Index('idx_reset_token_user_used', 'user_id', 'used'),
    )
