"""
Utilities module: exceptions and slug helpers.
"""

from shared.utils.exceptions import (
    AppException,
    NotFoundError,
    ValidationError,
    ConflictError,
    SlugConflict,
    DuplicateIdentity,
    TenantMismatch,
    DependencyFailure,
    ExternalLookupFailure,
)

__all__ = [
    "AppException",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "SlugConflict",
    "DuplicateIdentity",
    "TenantMismatch",
    "DependencyFailure",
    "ExternalLookupFailure",
]
