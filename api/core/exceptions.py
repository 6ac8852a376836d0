from typing import Any, Dict, Optional
from fastapi import FastAPI, Request, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from utils.logging import get_logger

logger = get_logger(__name__)

class BaseAPIException(Exception):
    """Base exception class for the API"""
    
    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

class ValidationError(BaseAPIException):
    """Validation error exception"""
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=400,
            error_code="VALIDATION_ERROR",
            details=details
        )

class AuthenticationError(BaseAPIException):
    """Authentication error exception"""
    
    def __init__(self, message: str = "Authentication required", error_code: str = "AUTHENTICATION_ERROR"):
        super().__init__(
            message=message,
            status_code=401,
            error_code=error_code
        )

class InvalidTokenError(AuthenticationError):
    """Bearer token failed signature or claim verification"""
    
    def __init__(self, message: str = "Invalid token"):
        super().__init__(message=message, error_code="INVALID_TOKEN")

class TokenExpiredError(AuthenticationError):
    """Bearer token is correctly signed but past its expiry"""
    
    def __init__(self, message: str = "Token expired"):
        super().__init__(message=message, error_code="TOKEN_EXPIRED")

class AuthorizationError(BaseAPIException):
    """Authorization error exception"""
    
    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(
            message=message,
            status_code=403,
            error_code="AUTHORIZATION_ERROR"
        )

class NotFoundError(BaseAPIException):
    """Not found error exception"""
    
    def __init__(self, message: str = "Resource not found"):
        super().__init__(
            message=message,
            status_code=404,
            error_code="NOT_FOUND_ERROR"
        )

class ConflictError(BaseAPIException):
    """Conflict error exception"""
    
    def __init__(self, message: str = "Resource conflict"):
        super().__init__(
            message=message,
            status_code=409,
            error_code="CONFLICT_ERROR"
        )

class ServiceError(BaseAPIException):
    """Internal service error exception"""
    
    def __init__(self, message: str = "Internal server error"):
        super().__init__(
            message=message,
            status_code=500,
            error_code="SERVICE_ERROR"
        )


def _error_body(request: Request, message: str, code: str, details: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "success": False,
        "message": message,
        "error": {
            "code": code,
            "details": details
        },
        "path": request.url.path,
        "method": request.method
    }

async def base_api_exception_handler(request: Request, exc: BaseAPIException) -> JSONResponse:
    """Handler for BaseAPIException and subclasses"""
    
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"API Exception: {exc.error_code} - {exc.message}",
        extra={
            "status_code": exc.status_code,
            "path": request.url.path,
        }
    )
    
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, exc.message, exc.error_code, exc.details),
        headers=headers,
    )

async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handler for HTTPException"""
    
    logger.warning(
        f"HTTP Exception: {exc.status_code} - {exc.detail}",
        extra={
            "status_code": exc.status_code,
            "path": request.url.path,
        }
    )
    
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, str(exc.detail), "HTTP_ERROR", {}),
        headers=getattr(exc, "headers", None),
    )

async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handler for RequestValidationError"""
    
    errors = jsonable_encoder(exc.errors())
    logger.warning(
        f"Validation Error: {errors}",
        extra={"path": request.url.path}
    )
    
    fields = [
        {
            "field": ".".join(str(part) for part in error.get("loc", []) if part != "body"),
            "message": error.get("msg"),
        }
        for error in errors
    ]
    return JSONResponse(
        status_code=422,
        content=_error_body(request, "Request validation failed", "VALIDATION_ERROR", {"errors": fields})
    )

async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler for all other exceptions"""
    
    logger.error(
        f"Unhandled Exception: {type(exc).__name__}: {exc}",
        exc_info=exc,
        extra={"path": request.url.path}
    )
    
    return JSONResponse(
        status_code=500,
        content=_error_body(request, "Internal server error", "INTERNAL_ERROR", {})
    )

def setup_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app"""

    app.add_exception_handler(BaseAPIException, base_api_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    logger.info("Exception handlers registered successfully")
