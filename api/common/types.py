"""
Common types and enums for the entire system
Single source of truth to avoid duplicates and ensure consistency
"""
from enum import Enum
from typing import FrozenSet


class UserRole(Enum):
    """Enum define staff roles"""
    ADMIN = "admin"
    MANAGER = "manager"
    AGENT = "agent"


# Role gates are explicit sets, not an ordering
ADMIN_ONLY: FrozenSet[str] = frozenset({UserRole.ADMIN.value})
MANAGER_OR_ADMIN: FrozenSet[str] = frozenset({UserRole.ADMIN.value, UserRole.MANAGER.value})
ANY_ROLE: FrozenSet[str] = frozenset(role.value for role in UserRole)


class ContactStatus(Enum):
    """Enum define contact triage status"""
    NOT_ATTENDED = "No Atendido"
    ON_HOLD = "En Espera"
    ATTENDED = "Atendido"
    SENT = "Enviado"


class ContactPriority(Enum):
    """Enum define contact priority"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
