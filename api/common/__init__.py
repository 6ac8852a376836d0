"""Common package for the whole system"""

from .types import (
    UserRole,
    ContactStatus,
    ContactPriority,
    ADMIN_ONLY,
    MANAGER_OR_ADMIN,
    ANY_ROLE,
)

__all__ = [
    "UserRole",
    "ContactStatus",
    "ContactPriority",
    "ADMIN_ONLY",
    "MANAGER_OR_ADMIN",
    "ANY_ROLE",
]
