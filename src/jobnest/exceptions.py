"""
JobNest - Custom Exceptions.

Centralized exception handling with standardized error responses.
"""

from typing import Any
from uuid import UUID


class JobNestException(Exception):
    """Base exception for JobNest application."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
        request_id: UUID | None = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        self.request_id = request_id
        super().__init__(message)


class UnauthorizedException(JobNestException):
    """Raised when a session token is missing or invalid."""

    def __init__(self, message: str = "Invalid or missing authentication token"):
        super().__init__(
            code="UNAUTHORIZED",
            message=message,
            status_code=401,
        )


class MissingFieldException(JobNestException):
    """Raised when a required request field is absent."""

    def __init__(self, *fields: str):
        names = ", ".join(fields)
        super().__init__(
            code="MISSING_FIELD",
            message=f"Missing required field(s): {names}",
            status_code=400,
            details={"fields": list(fields)},
        )


class ValidationException(JobNestException):
    """Raised for validation errors."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None, code: str = "VALIDATION_ERROR"):
        super().__init__(
            code=code,
            message=message,
            status_code=400,
            details={"errors": errors} if errors else None,
        )


class InvalidCredentialException(JobNestException):
    """Raised when an identity provider rejects the presented credential."""

    def __init__(self, provider: str, reason: str | None = None):
        self.provider = provider
        self.reason = reason
        super().__init__(
            code="INVALID_CREDENTIAL",
            message=f"Invalid {provider} credential",
            status_code=401,
            details={"provider": provider},
        )


class UpstreamUnavailableException(JobNestException):
    """Raised when an identity provider cannot be reached or misbehaves."""

    def __init__(self, provider: str, reason: str | None = None):
        self.provider = provider
        self.reason = reason
        super().__init__(
            code="UPSTREAM_UNAVAILABLE",
            message=f"{provider} authentication is temporarily unavailable",
            status_code=503,
            details={"provider": provider},
        )


class NotFoundException(JobNestException):
    """Raised when a resource is not found."""

    def __init__(self, resource_type: str, resource_id: str | UUID):
        super().__init__(
            code="NOT_FOUND",
            message=f"{resource_type} not found",
            status_code=404,
            details={"resource_type": resource_type, "resource_id": str(resource_id)},
        )


class StoreConflictException(JobNestException):
    """Raised by a store when a create collides with an existing identity key.

    Handled inside the identity resolver; never rendered to callers.
    """

    def __init__(self, key: str, value: Any = None):
        self.key = key
        self.value = value
        super().__init__(
            code="STORE_CONFLICT",
            message=f"Identity key already taken: {key}",
            status_code=409,
        )


class StoreUnavailableException(JobNestException):
    """Raised when the persistence layer fails. The cause is logged, not exposed."""

    def __init__(self, operation: str | None = None):
        self.operation = operation
        super().__init__(
            code="STORE_UNAVAILABLE",
            message="Authentication failed. Please try again later.",
            status_code=500,
        )
