"""
Response envelopes for the advisor API.

Tool-style endpoints wrap their payload in ``StandardResponse``; every error,
whatever raised it, is rendered as an ``ErrorResponse`` body.
"""

from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

T = TypeVar("T")


class ResponseStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


class StandardResponse(BaseModel, Generic[T]):
    """Success envelope: payload plus optional message and counters"""
    status: ResponseStatus = ResponseStatus.SUCCESS
    data: Optional[T] = None
    message: Optional[str] = None
    meta: Optional[Dict[str, Any]] = Field(None, description="Counts and paging hints")


class ErrorResponse(BaseModel):
    status: ResponseStatus = ResponseStatus.ERROR
    message: str
    code: Optional[str] = Field(None, description="Machine-readable error code, e.g. RETRIEVAL_ERROR")
    errors: List[str] = Field(default_factory=list, description="Per-field validation messages")
    details: Optional[Dict[str, Any]] = None


def success_response(data: Any, message: str = None, meta: Dict[str, Any] = None) -> StandardResponse:
    return StandardResponse(data=data, message=message, meta=meta)


def error_json(
    status_code: int,
    message: str,
    code: str,
    errors: Optional[List[str]] = None,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    body = ErrorResponse(message=message, code=code, errors=errors or [], details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))
