from .database.user import User
from .database.auth import PasswordResetToken
from .database.contact import Contact

__all__ = [
    "User",
    "PasswordResetToken",
    "Contact",
]
