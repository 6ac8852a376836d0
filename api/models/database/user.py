"""
Staff account model
"""
from typing import Dict, Any
from sqlalchemy import Column, String, Boolean, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import text
from common.types import UserRole
from models.database.base import BaseModel


class User(BaseModel):
    
    __tablename__ = "users"
    
    username = Column(
        String(100),
        nullable=False,
        comment="Username for login"
    )
    
    email = Column(
        String(255),
        nullable=False,
        comment="Email address"
    )
    
    hashed_password = Column(
        String(255),
        nullable=False,
        comment="Salted bcrypt hash"
    )
    
    role = Column(
        String(20),
        nullable=False,
        default=UserRole.AGENT.value,
        server_default=UserRole.AGENT.value,
        index=True,
        comment="User role: admin, manager, agent"
    )
    
    is_active = Column(
        Boolean,
        nullable=False,
        default=True,
        server_default=text("TRUE"),
        comment="Disabled accounts cannot authenticate"
    )
    
    reset_tokens = relationship(
        "PasswordResetToken",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    assigned_contacts = relationship(
        "Contact",
        back_populates="assignee",
        passive_deletes=True,
    )
    
    __table_args__ = (
        UniqueConstraint('username', name='uq_user_username'),
        UniqueConstraint('email', name='uq_user_email'),
        Index('idx_user_role_active', 'role', 'is_active'),
    )
    
    def __repr__(self) -> str:
        return f"<User(id='{self.id}', username='{self.username}', role='{self.role}')>"
    
    def to_public_dict(self) -> Dict[str, Any]:
        """Account fields safe to return to clients (never the hash)"""
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "role": self.role,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
