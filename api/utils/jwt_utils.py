"""
JWT utility functions for stateless session tokens
"""
from typing import Dict, Any, Optional
from datetime import timedelta
from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError
import uuid

from config.settings import get_settings
from utils.datetime_utils import DateTimeManager
from utils.logging import get_logger
from core.exceptions import AuthenticationError, TokenExpiredError, InvalidTokenError

logger = get_logger(__name__)

ACCESS_TOKEN_TYPE = "access"


class JWTManager:
    """
    Signed, time-limited session tokens.
    Tokens are never stored server-side; they stay valid until expiry.
    """
    
    @staticmethod
    def encode_token(payload: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
        """
        Encode JWT access token
        """
        settings = get_settings()
        jwt_settings = settings.get_jwt_settings()
        
        now = DateTimeManager._now()
        if expires_delta is None:
            expires_delta = timedelta(minutes=jwt_settings["access_token_expire_minutes"])
        jti = str(uuid.uuid4())
        
        claims = dict(payload)
        claims.update({
            "iat": now,
            "exp": now + expires_delta,
            "jti": jti,
            "type": ACCESS_TOKEN_TYPE,
            "iss": settings.APP_NAME
        })
        
        try:
            token = jwt.encode(
                claims,
                jwt_settings["secret_key"],
                algorithm=jwt_settings["algorithm"]
            )
        except JWTError as e:
            logger.error(f"Failed to encode token: {e}")
            raise AuthenticationError("Token encoding failed")
        
        logger.debug(f"Token encoded: jti={jti}")
        return token
    
    @staticmethod
    def decode_token(token: str) -> Dict[str, Any]:
        """
        Decode JWT token, distinguishing expired tokens from invalid ones
        """
        settings = get_settings()
        try:
            payload = jwt.decode(
                token,
                settings.JWT_SECRET_KEY,
                algorithms=[settings.JWT_ALGORITHM],
                issuer=settings.APP_NAME,
            )
        except ExpiredSignatureError:
            logger.info("Token decode failed: token expired")
            raise TokenExpiredError()
        except JWTError as e:
            logger.warning(f"Token decode failed: {e}")
            raise InvalidTokenError()
        
        if payload.get("type") != ACCESS_TOKEN_TYPE:
            logger.warning(f"Token decode failed: unexpected type {payload.get('type')}")
            raise InvalidTokenError()
        
        return payload
    
    @staticmethod
    def create_token_payload(user_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Identity claims carried by a session token
        """
        return {
            "user_id": user_data["id"],
            "username": user_data["username"],
            "email": user_data["email"],
            "role": user_data["role"],
        }
    
    @staticmethod
    def create_access_token(user_data: Dict[str, Any]) -> str:
        return JWTManager.encode_token(JWTManager.create_token_payload(user_data))
    
    @staticmethod
    def extract_user_context(token: str) -> Dict[str, Any]:
        """
        Extract the authenticated identity from an access token
        """
        payload = JWTManager.decode_token(token)
        
        user_id = payload.get("user_id")
        role = payload.get("role")
        if user_id is None or not role:
            logger.warning("Token missing identity claims")
            raise InvalidTokenError()
        
        return {
            "id": user_id,
            "username": payload.get("username"),
            "email": payload.get("email"),
            "role": role,
            "jti": payload.get("jti"),
        }

