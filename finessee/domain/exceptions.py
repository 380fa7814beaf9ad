"""Domain exceptions.

All domain-level errors raised by repositories and services. Each class
carries the HTTP status and machine-readable error code the API layer
reports for it, so routers never translate errors by hand.
"""

from typing import Any


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the application layer.
    """

    status_code: int = 400
    error_code: str = "ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFoundError(DomainError):
    """Raised when a product, user, feedback or wishlist entry is absent."""

    status_code = 404
    error_code = "NOT_FOUND"

    @classmethod
    def for_entity(cls, entity_type: str, entity_id: Any) -> "NotFoundError":
        """Build a not-found error for an entity.

        Args:
            entity_type: Type of entity (e.g., "Product", "User").
            entity_id: Identifier that was looked up.

        Returns:
            NotFoundError with entity context.
        """
        return cls(
            f"{entity_type} not found",
            details={"entity_type": entity_type, "entity_id": entity_id},
        )


class ConflictError(DomainError):
    """Raised for duplicate product codes, phone numbers or wishlist entries.

    Clients of the original API treat duplicates as a plain bad request,
    hence status 400 rather than 409.
    """

    status_code = 400
    error_code = "CONFLICT"


class ValidationError(DomainError):
    """Raised when input breaks a business rule."""

    status_code = 400
    error_code = "VALIDATION_ERROR"


class UnauthenticatedError(DomainError):
    """Raised when a request carries no valid session or credentials."""

    status_code = 401
    error_code = "UNAUTHENTICATED"


class ForbiddenError(DomainError):
    """Raised when the authenticated user lacks the required rights."""

    status_code = 403
    error_code = "FORBIDDEN"


class StorageError(DomainError):
    """Raised when the backing store fails (connectivity, constraints).

    The core never retries; callers decide how to report it.
    """

    status_code = 503
    error_code = "STORAGE_ERROR"
