from typing import Optional
from pydantic import BaseModel, Field


class UserInfoSchema(BaseModel):
    """Public account fields"""
    id: int
    username: str
    email: str
    role: str
    is_active: bool
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class LoginResponse(BaseModel):
    success: bool = True
    token: str = Field(..., description="JWT access token")
    token_type: str = "bearer"
    user: UserInfoSchema


class OperationResponse(BaseModel):
    success: bool
    message: str


class ProfileResponse(BaseModel):
    success: bool = True
    user: UserInfoSchema


class TokenValidationResponse(BaseModel):
    valid: bool
    message: Optional[str] = None
