"""Domain layer.

Holds the exception taxonomy shared by repositories, services and the API.
"""

from finessee.domain.exceptions import (
    ConflictError,
    DomainError,
    ForbiddenError,
    NotFoundError,
    StorageError,
    UnauthenticatedError,
    ValidationError,
)

__all__ = [
    "ConflictError",
    "DomainError",
    "ForbiddenError",
    "NotFoundError",
    "StorageError",
    "UnauthenticatedError",
    "ValidationError",
]
