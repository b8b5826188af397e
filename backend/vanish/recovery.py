# vanish/recovery.py
"""
Admin account recovery: a one-time sign-in ticket for a locked-out user.

The ticket comes from the identity provider, which only knows the
external id, so the lookup runs inside the recovery quarantine.
"""

import logging

from django.contrib.auth import get_user_model

from accounts.authz import ActorContext, require_admiral_rank
from accounts.commands import CommandResult
from identity.providers import get_identity_provider
from identity.quarantine import QuarantinePurpose, quarantine, reverse_lookup

logger = logging.getLogger(__name__)

User = get_user_model()


def issue_recovery_ticket(actor: ActorContext, target_public_id) -> CommandResult:
    """Admiral only. Returns CommandResult with the user and the ticket."""
    require_admiral_rank(actor.sovereign_id)

    try:
        target = User.objects.get(public_id=target_public_id, is_active=True)
    except User.DoesNotExist:
        return CommandResult.fail("User not found.")

    with quarantine(QuarantinePurpose.ACCOUNT_RECOVERY):
        external_id = reverse_lookup(target.public_id)

    if not external_id:
        return CommandResult.fail("User has no linked identity.")

    ticket = get_identity_provider().issue_sign_in_token(external_id)
    logger.info(
        "Recovery ticket issued",
        extra={"sovereign_id": str(target.public_id), "by": str(actor.sovereign_id)},
    )
    return CommandResult.ok({"user": target, "ticket": ticket})
