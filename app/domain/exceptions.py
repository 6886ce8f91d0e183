"""Domain exceptions for the RBAC service.

Errors raised by services and repositories when a request cannot be
satisfied (missing record, taken name, bad credentials). Each carries a
machine-readable error_code that app.core.exception_handlers turns into an
HTTP status and a JSON error body.
"""

from typing import Any


class RbacException(Exception):
    """Base exception for all application errors.

    Subclasses fix the error_code; the handler registered for this class
    serializes message, error_code and details for every subclass.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON error body for this exception."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class AuthenticationException(RbacException):
    """Raised when a login attempt fails (unknown email, wrong password, disabled user)."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class ResourceNotFoundException(RbacException):
    """Raised when a requested resource is not found (or is soft-deleted)."""

    def __init__(self, resource_type: str, resource_id: int | str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'user', 'role').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class DuplicateResourceException(RbacException):
    """Raised when a unique attribute (role name, user email, ...) is already taken."""

    def __init__(self, resource_type: str, field: str, value: Any) -> None:
        """Initialize with the resource type and the conflicting field/value.

        Args:
            resource_type: Type of resource (e.g. 'role').
            field: Unique field that collided (e.g. 'name').
            value: The value that already exists.
        """
        super().__init__(
            f"{resource_type} with {field} '{value}' already exists",
            "DUPLICATE_RESOURCE",
            {"resource_type": resource_type, "field": field, "value": value},
        )


class SqlNotConfiguredException(RbacException):
    """Raised when an operation needs the database but no engine could be built."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a SQL database that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )
