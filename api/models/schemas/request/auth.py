"""
Authentication request schemas
"""
from pydantic import AliasChoices, BaseModel, Field, field_validator


class LoginRequest(BaseModel):
    username: str = Field(
        ...,
        description="Username or email",
        validation_alias=AliasChoices("username", "identifier", "email"),
    )
    password: str = Field(..., description="Password")
    
    @field_validator('username')
    @classmethod
    def validate_username(cls, v):
        if not v or len(v.strip()) == 0:
            raise ValueError('Username cannot be empty')
        return v.strip()
    
    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        if not v:
            raise ValueError('Password cannot be empty')
        return v


class ForgotPasswordRequest(BaseModel):
    """Username or email of the account to recover"""
    identifier: str = Field(
        ...,
        description="Username or email",
        validation_alias=AliasChoices("identifier", "username", "email"),
    )

    @field_validator('identifier')
    @classmethod
    def validate_identifier(cls, v):
        if not v or len(v.strip()) == 0:
            raise ValueError('Username or email is required')
        return v.strip()


class ResetPasswordRequest(BaseModel):
    """Reset password request schema; password policy is enforced by the service"""
    token: str
    new_password: str = Field(
        ...,
        validation_alias=AliasChoices("new_password", "newPassword", "password"),
    )
