from .base import Base, BaseModel
from .user import User
from .auth import PasswordResetToken
from .contact import Contact

__all__ = [
    "Base",
    "BaseModel",
    "User",
    "PasswordResetToken",
    "Contact",
]
