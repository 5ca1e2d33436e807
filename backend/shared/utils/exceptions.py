"""
Centralized HTTP exceptions for consistent error handling.
Every exception logs itself with structured context on construction.

Usage:
    from shared.utils.exceptions import NotFoundError, SlugConflict, TenantMismatch

    raise NotFoundError("Menú", menu_id)
    raise SlugConflict("la-parrilla-del-sur", scope="platform")
    raise TenantMismatch("Sección", section_id, expected_tenant_id=1, actual_tenant_id=2)
"""

from fastapi import HTTPException, status
from typing import Any

from shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
    """
    Base exception. Logs itself once, at the level of its severity, with the
    keyword context it was raised with.
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        log_level: str = "warning",
        **log_context: Any,
    ):
        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, status_code=status_code, **log_context)

        super().__init__(status_code=status_code, detail=detail)

    def __str__(self) -> str:
        return str(self.detail)


# =============================================================================
# 404 Not Found Errors
# =============================================================================


class NotFoundError(AppException):
    """
    Entity not found error (404).

    Usage:
        raise NotFoundError("Restaurante", "la-parrilla-del-sur")
        raise NotFoundError("Menú", menu_id, tenant_id=tenant_id)
    """

    def __init__(self, entity: str, entity_id: int | str | None = None, **log_context: Any):
        if entity_id is not None:
            detail = f"{entity} con ID {entity_id} no encontrado"
        else:
            detail = f"{entity} no encontrado"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            log_level="warning",
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )


# =============================================================================
# 400 Bad Request Errors
# =============================================================================


class ValidationError(AppException):
    """
    Input validation error (400). Raised before any write.

    Usage:
        raise ValidationError("La contraseña debe tener al menos 8 caracteres")
        raise ValidationError("Monto inválido", field="amount", value=-1)
    """

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class InvalidTransitionError(ValidationError):
    """Invalid status transition."""

    def __init__(self, entity: str, from_status: str, to_status: str, **log_context: Any):
        detail = f"Transición inválida de '{from_status}' a '{to_status}' para {entity}"
        super().__init__(detail, entity=entity, from_status=from_status, to_status=to_status, **log_context)


# =============================================================================
# 409 Conflict Errors
# =============================================================================


class ConflictError(AppException):
    """
    Resource conflict error (409).

    Usage:
        raise ConflictError("El orden de la sección ya está en uso")
    """

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class SlugConflict(ConflictError):
    """
    Slug already taken in its uniqueness scope.

    Recoverable: the caller may retry with a different candidate.
    """

    def __init__(self, slug: str, scope: str, **log_context: Any):
        self.slug = slug
        self.scope = scope
        super().__init__(
            f"El identificador '{slug}' ya está en uso ({scope})",
            slug=slug,
            scope=scope,
            **log_context,
        )


class DuplicateIdentity(ConflictError):
    """An identity (email or unique identifier) already exists."""

    def __init__(self, entity: str, identifier: str, **log_context: Any):
        self.identifier = identifier
        super().__init__(
            f"{entity} con identificador '{identifier}' ya existe",
            entity=entity,
            **log_context,
        )


# =============================================================================
# 422 Tenant isolation errors
# =============================================================================


class TenantMismatch(AppException):
    """
    Referential or tenant-isolation violation (422).

    Always fatal to the operation. Never corrected silently.
    """

    def __init__(self, entity: str, entity_id: int | None = None, reason: str | None = None, **log_context: Any):
        detail = f"{entity} {entity_id} no pertenece al mismo tenant o padre" if entity_id is not None \
            else f"{entity} no pertenece al mismo tenant o padre"
        if reason:
            detail = f"{detail}: {reason}"

        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
            log_level="error",
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )


# =============================================================================
# 500 Internal Server Errors
# =============================================================================


class InternalError(AppException):
    """
    Internal server error (500).

    Usage:
        raise InternalError("No se pudo completar el aprovisionamiento", tenant_id=3)
    """

    def __init__(self, detail: str = "Error interno del servidor", **log_context: Any):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            log_level="error",
            **log_context,
        )


class DatabaseError(InternalError):
    """Database operation failed."""

    def __init__(self, operation: str, **log_context: Any):
        detail = f"Error de base de datos durante {operation}. Por favor intente de nuevo."
        super().__init__(detail, operation=operation, **log_context)


class ExternalServiceError(AppException):
    """A collaborator outside the database failed (502)."""

    def __init__(self, service: str, detail: str, **log_context: Any):
        self.service = service
        super().__init__(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=detail,
            log_level="error",
            service=service,
            **log_context,
        )


class DependencyFailure(ExternalServiceError):
    """
    A best-effort collaborator failed (QR encoder, audit write).

    Non-fatal: the step runner catches it and the operation continues.
    """

    def __init__(self, dependency: str, reason: str | None = None, **log_context: Any):
        detail = f"Falló la dependencia {dependency}"
        if reason:
            detail = f"{detail}: {reason}"
        super().__init__(dependency, detail=detail, **log_context)


class ExternalLookupFailure(ExternalServiceError):
    """Geo lookup timed out or errored. Degrades to "unknown"."""

    def __init__(self, reason: str, **log_context: Any):
        super().__init__(
            "geolocalización",
            detail=f"Falló la consulta de geolocalización: {reason}",
            **log_context,
        )
