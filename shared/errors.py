"""
Shared error handling for the BFF gateway.
"""

from typing import Any, Dict, Optional

from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    """Standard error response format."""

    model_config = ConfigDict(populate_by_name=True)

    message: str
    request_id: Optional[str] = Field(default=None, alias="requestId")


class GatewayException(Exception):
    """Base exception for gateway failures that terminate a request."""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def payload(self, request_id: Optional[str]) -> Dict[str, Any]:
        """Build the JSON body returned to the client."""
        return ErrorResponse(message=self.message, request_id=request_id).model_dump(by_alias=True)

    def to_response(self, request_id: Optional[str]) -> JSONResponse:
        return JSONResponse(status_code=self.status_code, content=self.payload(request_id))


class ValidationError(GatewayException):
    """Malformed client input."""

    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class AuthenticationError(GatewayException):
    """Missing or invalid credential."""

    status_code = 401
    code = "AUTHENTICATION_ERROR"

    def __init__(self, message: str = "Authentication failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class AuthorizationError(GatewayException):
    """Entitlement gate denial."""

    status_code = 403
    code = "AUTHORIZATION_ERROR"

    def __init__(self, message: str = "Authorization failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class RateLimitError(GatewayException):
    """Admission capacity exhausted."""

    status_code = 429
    code = "RATE_LIMIT_ERROR"

    def __init__(self, message: str = "Too many requests", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class UpstreamUnavailableError(GatewayException):
    """Transport failure or undecodable body from a downstream service."""

    status_code = 502
    code = "UPSTREAM_UNAVAILABLE"

    def __init__(self, service: str, details: Optional[Dict[str, Any]] = None):
        self.service = service
        super().__init__(f"{service}-service unavailable", details)


class AggregateUnreadyError(GatewayException):
    """One or more readiness probes failed."""

    status_code = 503
    code = "NOT_READY"

    def __init__(self, status: Dict[str, bool]):
        self.status = dict(status)
        failed = sorted(name for name, ok in self.status.items() if not ok)
        super().__init__("Downstream services not ready", details={"failed": failed})

    def payload(self, request_id: Optional[str]) -> Dict[str, Any]:
        return {"ready": False, "status": self.status}
