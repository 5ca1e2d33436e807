"""
Provisioning steps and their failure policies.

Every step declares how a failure is handled:

    FATAL        propagate; the whole run is rolled back
    WARN         roll back the step's savepoint, log, report a warning
    BEST_EFFORT  roll back the step's savepoint, log only

Tenant isolation violations are always fatal, whatever the step declares.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rest_api.services.provisioning.result import ProvisioningResult
from shared.config.logging import provisioning_logger as logger
from shared.utils.exceptions import AppException, TenantMismatch

T = TypeVar("T")


class FailurePolicy(str, Enum):
    FATAL = "fatal"
    WARN = "warn"
    BEST_EFFORT = "best_effort"


@dataclass(frozen=True)
class ProvisioningStep(Generic[T]):
    """A named unit of provisioning work."""

    name: str
    action: Callable[[], T]
    policy: FailurePolicy = FailurePolicy.FATAL


class StepRunner:
    """
    Executes steps under their failure policy.

    Non-fatal steps run inside a SAVEPOINT so a failure leaves no partial
    rows behind while the enclosing unit of work carries on.
    """

    def __init__(self, db: Session, result: ProvisioningResult):
        self._db = db
        self._result = result

    def run(self, step: ProvisioningStep[T]) -> T | None:
        if step.policy is FailurePolicy.FATAL:
            logger.debug("Provisioning step", step=step.name)
            return step.action()

        try:
            with self._db.begin_nested():
                return step.action()
        except TenantMismatch:
            raise
        except (AppException, SQLAlchemyError) as e:
            if step.policy is FailurePolicy.WARN:
                logger.warning("Provisioning step failed", step=step.name, error=str(e))
                self._result.warn(f"{step.name}: {e}")
            else:
                logger.info("Provisioning step skipped", step=step.name, error=str(e))
            return None

    def __call__(
        self,
        name: str,
        action: Callable[[], T],
        policy: FailurePolicy = FailurePolicy.FATAL,
    ) -> T | None:
        return self.run(ProvisioningStep(name, action, policy))
