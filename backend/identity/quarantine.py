# identity/quarantine.py
"""
Quarantined registry operations: sovereign id -> external id, and delete.

Knowing a user's external provider id couples application code to the
provider. Only the account-deletion and admin-recovery flows (vanish app)
may do it, and only while a quarantine context is active:

    with quarantine(QuarantinePurpose.ACCOUNT_DELETION):
        external_id = reverse_lookup(sovereign_id)
        delete_mapping(sovereign_id)

Calls outside a quarantine are logged as critical and raise
QuarantineViolation.

The active purpose lives in a ContextVar so it is scoped to the current
thread / task and reset by token.
"""

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Optional

from django.db import models

from identity.exceptions import QuarantineViolation
from identity.models import IdentityMapping

logger = logging.getLogger(__name__)


class QuarantinePurpose(models.TextChoices):
    ACCOUNT_DELETION = "account-deletion", "Account deletion"
    ACCOUNT_RECOVERY = "account-recovery", "Account recovery"


_active_purpose: ContextVar[Optional[str]] = ContextVar(
    "identity_quarantine",
    default=None,
)


def current_purpose() -> Optional[str]:
    return _active_purpose.get()


@contextmanager
def quarantine(purpose):
    if purpose not in QuarantinePurpose.values:
        logger.critical("Quarantine entered with unknown purpose %r", purpose)
        raise QuarantineViolation(f"Unknown quarantine purpose: {purpose!r}")
    token = _active_purpose.set(str(purpose))
    try:
        yield
    finally:
        _active_purpose.reset(token)


def _require_quarantine(operation: str, sovereign_id) -> str:
    purpose = _active_purpose.get()
    if purpose is None:
        logger.critical(
            "Quarantine violation: %s called outside a quarantine",
            operation,
            extra={"sovereign_id": str(sovereign_id)},
        )
        raise QuarantineViolation(f"{operation} requires an active quarantine")
    return purpose


def reverse_lookup(sovereign_id) -> Optional[str]:
    """External id for a sovereign id, None if unmapped."""
    purpose = _require_quarantine("reverse_lookup", sovereign_id)
    logger.info(
        "Quarantined reverse lookup",
        extra={"sovereign_id": str(sovereign_id), "purpose": purpose},
    )
    return (
        IdentityMapping.objects.filter(user__public_id=sovereign_id)
        .values_list("external_id", flat=True)
        .first()
    )


def delete_mapping(sovereign_id) -> bool:
    """Remove the mapping for a sovereign id. Returns whether one existed."""
    purpose = _require_quarantine("delete_mapping", sovereign_id)
    deleted, _ = IdentityMapping.objects.filter(user__public_id=sovereign_id).delete()
    logger.info(
        "Quarantined mapping delete",
        extra={"sovereign_id": str(sovereign_id), "purpose": purpose, "deleted": bool(deleted)},
    )
    return bool(deleted)
