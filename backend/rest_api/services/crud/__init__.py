"""
CRUD building blocks.

Provides:
- Repository Pattern: Type-safe data access with tenant isolation
- AuditRecorder: Best-effort, append-only audit trail
"""

from .repository import BaseRepository, TenantRepository
from .audit import AuditRecorder, serialize_model

__all__ = [
    # Repository Pattern
    "BaseRepository",
    "TenantRepository",
    # Audit
    "AuditRecorder",
    "serialize_model",
]
