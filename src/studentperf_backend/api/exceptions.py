from fastapi import HTTPException, status
from typing import Any, Dict, Optional
from studentperf_backend.permissions.verdict import DenyReason

class BadRequestException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_400_BAD_REQUEST
        self.detail = detail or "Bad request"

class NotFoundException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_404_NOT_FOUND
        self.detail = detail or "Not found"

class ForbiddenException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_403_FORBIDDEN
        self.detail = detail or "Forbidden"

class UnauthorizedException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_401_UNAUTHORIZED
        self.detail = detail or "Unauthorized"

class InternalServerException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        self.detail = detail or "Internal server error"

def verdict_to_http_exception(reason: DenyReason, detail: Any = None) -> HTTPException:
    if reason == DenyReason.UNAUTHENTICATED:
        return UnauthorizedException(detail=detail)
    elif reason == DenyReason.NOT_FOUND:
        return NotFoundException(detail=detail)
    elif reason == DenyReason.FORBIDDEN:
        return ForbiddenException(detail=detail)
    else:
        # Unsupported requests are defects on the calling side
        return InternalServerException(detail=detail)
