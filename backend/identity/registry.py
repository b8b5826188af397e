# identity/registry.py
"""
Identity Registry: external id -> sovereign id.

Provides:
- register: idempotent, conflict-raising mapping insert
- lookup_by_external_id: forward lookup (miss is None, never raises)
- audit_registry: integrity pass over every mapping

The reverse direction (sovereign id -> external id) and deletion are NOT
here. They live in identity.quarantine.

Uniqueness is enforced by database constraints on IdentityMapping. A
concurrent insert that loses the race re-reads the committed winner.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional
from uuid import UUID

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Count

from identity.exceptions import IdentityConflict
from identity.models import IdentityMapping

logger = logging.getLogger(__name__)

User = get_user_model()


def _as_uuid(value) -> UUID:
    return value if isinstance(value, UUID) else UUID(str(value))


def _conflict(message: str, external_id: str, sovereign_id) -> IdentityConflict:
    logger.critical(
        "Identity registry conflict: %s",
        message,
        extra={"sovereign_id": str(sovereign_id)},
    )
    return IdentityConflict(message, external_id=external_id, sovereign_id=sovereign_id)


def _mapping_for_external(external_id: str) -> Optional[IdentityMapping]:
    return (
        IdentityMapping.objects.select_related("user")
        .filter(external_id=external_id)
        .first()
    )


def _mapping_for_user(user) -> Optional[IdentityMapping]:
    return IdentityMapping.objects.filter(user=user).first()


def _check_same_owner(mapping: IdentityMapping, external_id: str, sovereign_id: UUID) -> IdentityMapping:
    if mapping.user.public_id != sovereign_id:
        raise _conflict(
            "external id is already mapped to a different sovereign user",
            external_id,
            sovereign_id,
        )
    return mapping


def register(external_id: str, sovereign_id, provider: Optional[str] = None) -> IdentityMapping:
    """
    Ensure external_id maps to sovereign_id.

    Returns the existing mapping unchanged when the pair is already
    registered, otherwise inserts and returns a new one.

    Raises:
        ValueError: empty external id
        User.DoesNotExist: sovereign id does not resolve
        IdentityConflict: either side is already mapped to something else
    """
    if not external_id:
        raise ValueError("external_id is required")
    sovereign_id = _as_uuid(sovereign_id)
    provider = provider or settings.IDENTITY_PROVIDER_TAG

    existing = _mapping_for_external(external_id)
    if existing is not None:
        return _check_same_owner(existing, external_id, sovereign_id)

    user = User.objects.get(public_id=sovereign_id)
    owned = _mapping_for_user(user)
    if owned is not None:
        # Identical pair committed since the first read.
        if owned.external_id == external_id:
            return owned
        raise _conflict(
            "sovereign user is already mapped to a different external id",
            external_id,
            sovereign_id,
        )

    try:
        with transaction.atomic():
            mapping = IdentityMapping.objects.create(
                external_id=external_id,
                user=user,
                provider=provider,
            )
    except IntegrityError:
        # Lost a concurrent insert; the first committed mapping is canonical.
        winner = _mapping_for_external(external_id)
        if winner is None:
            raise _conflict(
                "sovereign user was mapped concurrently to a different external id",
                external_id,
                sovereign_id,
            )
        return _check_same_owner(winner, external_id, sovereign_id)

    logger.info(
        "Identity mapping registered",
        extra={"sovereign_id": str(sovereign_id), "provider": provider},
    )
    return mapping


def lookup_by_external_id(external_id: str) -> Optional[UUID]:
    """Sovereign id for a known external id, None otherwise."""
    if not external_id:
        return None
    return (
        IdentityMapping.objects.filter(external_id=external_id)
        .values_list("user__public_id", flat=True)
        .first()
    )


@dataclass
class RegistryAuditReport:
    mappings: int = 0
    unmapped_users: List[str] = field(default_factory=list)

    @property
    def warnings(self) -> List[str]:
        return [f"User {sid} has no identity mapping." for sid in self.unmapped_users]


def audit_registry() -> RegistryAuditReport:
    """
    Verify the one-to-one invariant over the whole registry.

    Raises:
        IdentityConflict: any external id or user appears in more than one mapping
    """
    duplicate_external = (
        IdentityMapping.objects.values("external_id")
        .annotate(n=Count("id"))
        .filter(n__gt=1)
        .first()
    )
    if duplicate_external:
        raise _conflict(
            f"external id mapped {duplicate_external['n']} times",
            duplicate_external["external_id"],
            None,
        )

    duplicate_user = (
        IdentityMapping.objects.values("user__public_id")
        .annotate(n=Count("id"))
        .filter(n__gt=1)
        .first()
    )
    if duplicate_user:
        raise _conflict(
            f"sovereign user mapped {duplicate_user['n']} times",
            None,
            duplicate_user["user__public_id"],
        )

    mapped_users = IdentityMapping.objects.values("user_id")
    unmapped = (
        User.objects.filter(is_active=True)
        .exclude(pk__in=mapped_users)
        .values_list("public_id", flat=True)
    )
    return RegistryAuditReport(
        mappings=IdentityMapping.objects.count(),
        unmapped_users=[str(sid) for sid in unmapped],
    )
