"""
Exception hierarchy and FastAPI exception handlers.

Retrieval failures are modelled as ``RetrievalError`` so that callers can tell
"retrieval unavailable" apart from "no evidence exists" (an empty result).
"""

import logging
from typing import Any, Dict, List, Optional
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .responses import error_json

logger = logging.getLogger(__name__)


class BaseAPIException(Exception):
    """Base for errors that map onto an HTTP status and an error code"""
    status_code = 500
    default_code = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str, code: str = None, details: Dict[str, Any] = None):
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationException(BaseAPIException):
    status_code = 400
    default_code = "VALIDATION_ERROR"

    def __init__(self, message: str, field_errors: List[str] = None):
        self.field_errors = field_errors or []
        super().__init__(message, details={"field_errors": self.field_errors})


class NotFoundException(BaseAPIException):
    status_code = 404
    default_code = "NOT_FOUND"

    def __init__(self, message: str, resource_type: str = None, resource_id: Any = None):
        details = {}
        if resource_type:
            details["resource_type"] = resource_type
        if resource_id is not None:
            details["resource_id"] = resource_id
        super().__init__(message, details=details)


class UnauthorizedException(BaseAPIException):
    status_code = 401
    default_code = "UNAUTHORIZED"

    def __init__(self, message: str = "Unauthorized access"):
        super().__init__(message)


class ExternalServiceException(BaseAPIException):
    """A collaborator outside this process failed"""
    status_code = 502
    default_code = "EXTERNAL_SERVICE_ERROR"

    def __init__(self, message: str, service: Optional[str] = None):
        super().__init__(message, details={"service": service} if service else {})


class RetrievalError(ExternalServiceException):
    """Embedding or chunk-store failure during retrieval (including timeouts)."""
    default_code = "RETRIEVAL_ERROR"


def _request_fields(request: Request) -> Dict[str, Any]:
    return {
        "path": request.url.path,
        "method": request.method,
        "org_id": request.headers.get("x-org-id"),
    }


def setup_exception_handlers(app):
    """Render every error as an ErrorResponse body"""

    @app.exception_handler(BaseAPIException)
    async def api_exception_handler(request: Request, exc: BaseAPIException):
        logger.warning(f"{exc.__class__.__name__}: {exc.message} ({exc.code})", extra=_request_fields(request))
        return error_json(exc.status_code, exc.message, exc.code, details=exc.details)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        field_errors = [
            f"{' -> '.join(str(loc) for loc in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        ]
        logger.warning(f"Request validation failed: {field_errors}", extra=_request_fields(request))
        return error_json(422, "Validation failed", "VALIDATION_ERROR", errors=field_errors)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return error_json(exc.status_code, str(exc.detail), f"HTTP_{exc.status_code}")

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled {exc.__class__.__name__}: {exc}", extra=_request_fields(request), exc_info=True)
        return error_json(500, "An unexpected error occurred", "INTERNAL_SERVER_ERROR")


def raise_unauthorized(message: str = "Unauthorized access"):
    raise UnauthorizedException(message)
