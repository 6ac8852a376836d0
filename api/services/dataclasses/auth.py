from dataclasses import dataclass
from typing import Any, Dict, Optional


INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"
FORGOT_PASSWORD_MESSAGE = (
    "If the account exists, an email with instructions to reset the password has been sent."
)
INVALID_RESET_TOKEN_MESSAGE = "Invalid or expired token"
INACTIVE_USER_MESSAGE = "User not found or inactive"
PASSWORD_RESET_MESSAGE = "Password has been reset. You can now log in with your new password."


@dataclass
class LoginResult:
    """Outcome of a credential check"""
    success: bool
    token: Optional[str] = None
    user: Optional[Dict[str, Any]] = None
    message: Optional[str] = None


@dataclass
class OperationOutcome:
    """Outcome of the forgot/reset password flows"""
    success: bool
    message: str


@dataclass
class TokenValidation:
    """Outcome of the read-only reset token probe"""
    valid: bool
    message: Optional[str] = None


@dataclass
class ResetRecipient:
    """Snapshot of the account a reset notification is addressed to"""
    user_id: int
    username: str
    email: str
