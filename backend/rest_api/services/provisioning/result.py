"""
Provisioning result.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field


@dataclass
class ProvisioningResult:
    """What a provisioning run created, plus the non-fatal problems it met."""

    tenant_id: int | None = None
    platform_admin_id: int | None = None
    user_ids: dict[str, int] = field(default_factory=dict)  # email -> id
    restaurant_ids: dict[str, int] = field(default_factory=dict)  # slug -> id
    menu_ids: list[int] = field(default_factory=list)
    counts: Counter = field(default_factory=Counter)
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.warnings

    def warn(self, message: str) -> None:
        self.warnings.append(message)

    def summary(self) -> dict:
        return {
            "tenant_id": self.tenant_id,
            "platform_admin_id": self.platform_admin_id,
            "counts": dict(self.counts),
            "warnings": list(self.warnings),
        }
