# vanish/cascade.py
"""
Account deletion cascade.

Who may delete:
- An Admiral may delete any non-Admiral user, with a mandatory reason
- Any user may delete its own account (Admirals excepted)

Admirals are never deleted here so the fleet cannot lose its last one.

Steps:
1. Open DeletionLog (in_progress)
2. In one transaction, inside the deletion quarantine:
   reverse lookup the external id, delete the identity mapping, delete the user
3. Ask the provider to delete the external account (outside the
   transaction; a provider error is recorded, not fatal)
4. Close DeletionLog (completed / failed)
"""

import logging

from django.contrib.auth import get_user_model
from django.db import DatabaseError, transaction
from django.utils import timezone

from accounts.authz import ActorContext, require_admiral_rank
from accounts.commands import CommandResult
from identity.providers import get_identity_provider
from identity.quarantine import QuarantinePurpose, delete_mapping, quarantine, reverse_lookup
from ranks.hierarchy import Rank
from vanish.models import DeletionLog

logger = logging.getLogger(__name__)

User = get_user_model()


def delete_user_account(actor: ActorContext, target_public_id, reason: str = "") -> CommandResult:
    """
    Delete a sovereign user and everything that identifies it.

    Returns:
        CommandResult with the DeletionLog
    """
    reason = (reason or "").strip()
    self_deletion = str(target_public_id) == str(actor.sovereign_id)

    if not self_deletion:
        require_admiral_rank(actor.sovereign_id)
        if not reason:
            return CommandResult.fail("A reason is required to delete another user.")

    try:
        target = User.objects.get(public_id=target_public_id)
    except User.DoesNotExist:
        return CommandResult.fail("User not found.")

    if target.rank == Rank.ADMIRAL:
        return CommandResult.fail("Admiral accounts cannot be deleted.")

    log = DeletionLog.objects.create(
        sovereign_id=target.public_id,
        email=target.email,
        rank=target.rank,
        setup_status=target.setup_status,
        subscription_status=target.subscription_status,
        deleted_by=actor.sovereign_id,
        self_deletion=self_deletion,
        reason=reason,
    )

    try:
        with transaction.atomic():
            with quarantine(QuarantinePurpose.ACCOUNT_DELETION):
                external_id = reverse_lookup(target.public_id)
                log.mapping_deleted = delete_mapping(target.public_id)
            target.delete()
    except DatabaseError as exc:
        logger.error(
            "Account deletion failed",
            extra={"sovereign_id": str(log.sovereign_id), "error": str(exc)},
        )
        log.status = DeletionLog.Status.FAILED
        log.mapping_deleted = False
        log.error = str(exc)
        log.completed_at = timezone.now()
        log.save()
        return CommandResult.fail("Account deletion failed.")

    if external_id:
        try:
            log.provider_deleted = get_identity_provider().delete_user(external_id)
        except Exception as exc:
            # The local account is already gone; keep the error for follow-up.
            logger.exception(
                "Provider account deletion failed",
                extra={"sovereign_id": str(log.sovereign_id)},
            )
            log.provider_deleted = False
            log.provider_error = str(exc)

    log.status = DeletionLog.Status.COMPLETED
    log.completed_at = timezone.now()
    log.save()

    logger.info(
        "Account deleted",
        extra={
            "sovereign_id": str(log.sovereign_id),
            "self_deletion": self_deletion,
            "by": str(actor.sovereign_id),
        },
    )
    return CommandResult.ok({"log": log})
