"""
Global exception handling for the application.
Every externally visible failure maps to a stable (code, message) pair;
internal details (raw store or SMTP errors) stay in the logs.
"""

from enum import Enum
from typing import Any, Dict, Optional

import structlog
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = structlog.get_logger(__name__)


class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    @property
    def code(self) -> str:
        return self.__class__.__name__


class ValidationException(AppError):
    """Request input has the wrong shape."""
    def __init__(self, message: str = "Invalid request", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_400_BAD_REQUEST, details)


class EntityNotFoundException(AppError):
    """Resource not found error."""
    def __init__(self, message: str = "Entity not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_404_NOT_FOUND, details)


class ConflictException(AppError):
    """Resource already exists."""
    def __init__(self, message: str = "Conflict", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_409_CONFLICT, details)


class UnauthorizedException(AppError):
    """Authentication failure error."""
    def __init__(self, message: str = "Unauthorized", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_401_UNAUTHORIZED, details)


class ForbiddenException(AppError):
    """Authorization failure error."""
    def __init__(self, message: str = "Forbidden", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_403_FORBIDDEN, details)


class InfrastructureError(AppError):
    """Store, signing or other backend failure. The message is never echoed."""
    public_message = "An unexpected error occurred. Please try again later."

    def __init__(self, message: str = "Infrastructure failure", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR, details)


class ConfigurationError(InfrastructureError):
    """A required setting (e.g. the signing secret) is missing."""


# =============================================================================
# Authentication
# =============================================================================


class AuthenticationError(UnauthorizedException):
    """Base for everything that stops a caller from obtaining a session."""


class InvalidCredentials(AuthenticationError):
    def __init__(self):
        super().__init__("Invalid email or password")


class AccountInactive(AuthenticationError):
    def __init__(self):
        super().__init__("Account is not active")
        self.status_code = status.HTTP_403_FORBIDDEN


class EmailNotVerified(AuthenticationError):
    def __init__(self):
        super().__init__("Please verify your email address before logging in")
        self.status_code = status.HTTP_403_FORBIDDEN


class InvalidToken(AuthenticationError):
    def __init__(self, message: str = "Invalid authentication token"):
        super().__init__(message)


class TokenExpired(AuthenticationError):
    def __init__(self):
        super().__init__("Authentication token has expired")


class EmailAlreadyExists(ConflictException):
    def __init__(self, email: str):
        super().__init__(f"Email {email} already exists")


class UserNotFound(EntityNotFoundException):
    def __init__(self, email: str):
        super().__init__(f"User with email {email} not found")


class InvalidVerificationCode(AppError):
    def __init__(self):
        super().__init__("Invalid verification code", status.HTTP_400_BAD_REQUEST)


class VerificationCodeExpired(AppError):
    def __init__(self):
        super().__init__("Verification code has expired", status.HTTP_400_BAD_REQUEST)


class NotificationFailed(AppError):
    def __init__(self, message: str = "Failed to send verification email"):
        super().__init__(message, status.HTTP_502_BAD_GATEWAY)


class PermissionDenied(ForbiddenException):
    def __init__(self, message: str = "You don't have permission to perform this action"):
        super().__init__(message)


# =============================================================================
# Resource errors
# =============================================================================


class ResourceKind(str, Enum):
    USER = "user"
    ANNOUNCEMENT = "announcement"
    CONTRIBUTION = "contribution"
    PAYMENT = "payment"
    PHOTO = "photo"


class DomainErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    NO_UPDATE_FIELDS = "no_update_fields"
    INFRASTRUCTURE = "infrastructure"


_DOMAIN_STATUS = {
    DomainErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    DomainErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    DomainErrorKind.NO_UPDATE_FIELDS: status.HTTP_400_BAD_REQUEST,
    DomainErrorKind.INFRASTRUCTURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class DomainError(AppError):
    """One error type shared by every resource, tagged with kind and resource."""

    def __init__(self, kind: DomainErrorKind, resource: ResourceKind, resource_id: Any = None):
        self.kind = kind
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(
            self._describe(),
            _DOMAIN_STATUS[kind],
            {"resource": resource.value, "kind": kind.value},
        )

    def _describe(self) -> str:
        name = self.resource.value.capitalize()
        if self.kind is DomainErrorKind.NOT_FOUND:
            if self.resource_id is not None:
                return f"{name} {self.resource_id} not found"
            return f"{name} not found"
        if self.kind is DomainErrorKind.CONFLICT:
            return f"{name} already exists"
        if self.kind is DomainErrorKind.NO_UPDATE_FIELDS:
            return "No fields provided for update"
        return f"Failed to process {self.resource.value}"

    @property
    def code(self) -> str:
        return f"{self.resource.value}_{self.kind.value}"

    @classmethod
    def not_found(cls, resource: ResourceKind, resource_id: Any = None) -> "DomainError":
        return cls(DomainErrorKind.NOT_FOUND, resource, resource_id)


# =============================================================================
# Handler
# =============================================================================


def _is_internal(exc: AppError) -> bool:
    if isinstance(exc, InfrastructureError):
        return True
    return isinstance(exc, DomainError) and exc.kind is DomainErrorKind.INFRASTRUCTURE


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all uncaught exceptions globally."""

    if isinstance(exc, AppError) and not _is_internal(exc):
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": {
                    "code": exc.code,
                    "message": exc.message,
                    "details": exc.details,
                    "path": request.url.path,
                }
            },
        )

    logger.error(
        "Unhandled error",
        path=request.url.path,
        error_type=exc.__class__.__name__,
        error=str(exc),
        exc_info=exc,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "InternalServerError",
                "message": InfrastructureError.public_message,
                "path": request.url.path,
            }
        },
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request-shape errors in the same envelope as every other failure."""
    errors = [
        {"field": ".".join(str(part) for part in error["loc"]), "message": error["msg"]}
        for error in exc.errors()
    ]
    return await global_exception_handler(request, ValidationException(details={"errors": errors}))
