"""
User management request schemas
"""
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator

from common.types import UserRole


def _validate_role(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    allowed = [role.value for role in UserRole]
    if v not in allowed:
        raise ValueError(f"Role must be one of: {', '.join(allowed)}")
    return v


class UserCreateRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    role: str = Field(UserRole.AGENT.value, description="admin, manager or agent")
    is_active: bool = True

    @field_validator('username')
    @classmethod
    def validate_username(cls, v):
        v = v.strip()
        if len(v) < 3:
            raise ValueError('Username must be at least 3 characters')
        return v

    @field_validator('role')
    @classmethod
    def validate_role(cls, v):
        return _validate_role(v)


class UserUpdateRequest(BaseModel):
    """Partial update; omitted fields are left unchanged"""
    username: Optional[str] = Field(None, min_length=3, max_length=100)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=8, max_length=128)
    role: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator('role')
    @classmethod
    def validate_role(cls, v):
        return _validate_role(v)
