"""
Schemas package for API data models
All Pydantic models for request/response validation
"""

from .request.auth import LoginRequest, ForgotPasswordRequest, ResetPasswordRequest
from .request.user import UserCreateRequest, UserUpdateRequest
from .responses.auth import (
    UserInfoSchema,
    LoginResponse,
    OperationResponse,
    ProfileResponse,
    TokenValidationResponse,
)
from .responses.user import UserResponse, UserListResponse, PaginationSchema
from .responses.health import (
    BasicHealthResponse,
    ReadinessResponse,
    LivenessResponse,
    HealthStatus,
)

__all__ = [
    "LoginRequest",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "UserCreateRequest",
    "UserUpdateRequest",
    "UserInfoSchema",
    "LoginResponse",
    "OperationResponse",
    "ProfileResponse",
    "TokenValidationResponse",
    "UserResponse",
    "UserListResponse",
    "PaginationSchema",
    "BasicHealthResponse",
    "ReadinessResponse",
    "LivenessResponse",
    "HealthStatus",
]
