"""
Authentication Middleware for FastAPI
JWT-based authentication with role verification for Depends()
"""
from typing import Optional, Dict, Any, Iterable
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from common.types import ADMIN_ONLY, MANAGER_OR_ADMIN, ANY_ROLE
from core.exceptions import AuthenticationError, AuthorizationError
from utils.jwt_utils import JWTManager
from utils.logging import get_logger

logger = get_logger(__name__)

security = HTTPBearer(auto_error=False)


class JWTAuth:
    """
    JWT authentication handler
    """
    
    @staticmethod
    async def get_current_user(
        request: Request,
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
    ) -> Dict[str, Any]:
        """
        Get current user from JWT token
        Missing credentials, bad signatures and expired tokens all end in 401
        """
        if credentials is None or not credentials.credentials:
            raise AuthenticationError("Authentication required")

        user_context = JWTManager.extract_user_context(credentials.credentials)
        request.state.user = user_context

        logger.debug(f"Authenticated user: {user_context['id']} with role: {user_context['role']}")
        return user_context


class RoleRequired:
    """
    Role-based access control for endpoints
    """
    
    def __init__(self, allowed_roles: Iterable[str]):
        self.allowed_roles = frozenset(allowed_roles)
    
    async def __call__(
        self,
        user_context: Dict[str, Any] = Depends(JWTAuth.get_current_user)
    ) -> Dict[str, Any]:
        """
        Verify user has required role
        """
        user_role = user_context.get("role")
        
        if user_role not in self.allowed_roles:
            logger.warning(
                f"Access denied for user {user_context.get('id')} "
                f"with role {user_role}. Required roles: {sorted(self.allowed_roles)}"
            )
            raise AuthorizationError("Insufficient permissions")
        
        return user_context


require_admin = RoleRequired(ADMIN_ONLY)
require_manager_or_admin = RoleRequired(MANAGER_OR_ADMIN)
require_user = RoleRequired(ANY_ROLE)

AdminOnly = Depends(require_admin)
ManagerOrAdmin = Depends(require_manager_or_admin)
AuthenticatedUser = Depends(require_user)
