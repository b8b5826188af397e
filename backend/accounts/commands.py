# accounts/commands.py
"""
Command layer for account operations.

ALL rank and profile mutations MUST go through these commands:
- Profile updates
- Rank changes
- Invitations

This ensures:
1. Consistent validation
2. Rank re-derived from the database for every decision
3. Single point of enforcement
"""

import logging

from django.db import transaction
from django.utils import timezone

from accounts.authz import ActorContext, require_admiral_rank, require_minimum_rank
from accounts.models import Invitation, User
from ranks.hierarchy import Rank, has_minimum_rank, parse_rank

logger = logging.getLogger(__name__)


class CommandResult:
    def __init__(self, success: bool, data=None, error: str = None):
        self.success = success
        self.data = data
        self.error = error

    @classmethod
    def ok(cls, data=None):
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str):
        return cls(success=False, error=error)


# Fields a user may change on its own profile. Rank, email and
# subscription are owned by other flows.
PROFILE_FIELDS = frozenset({
    "first_name",
    "last_name",
    "secondary_email",
    "avatar_url",
    "brand_logo_url",
    "setup_status",
    "business_country",
    "entity_name",
    "social_name",
    "phone_number",
    "theme_name",
    "theme_dark",
    "miror_enchantment_enabled",
    "miror_enchantment_timing",
    "dashboard_layout",
    "dashboard_widgets",
})


# =============================================================================
# Profile
# =============================================================================

@transaction.atomic
def update_profile(actor: ActorContext, **updates) -> CommandResult:
    """
    Update the actor's own profile.

    Unknown fields are ignored. The caller refreshes its session
    credential afterwards (/api/session/refresh).

    Returns:
        CommandResult with the user and the changed field names
    """
    user = actor.user
    changed = []
    for field, value in updates.items():
        if field not in PROFILE_FIELDS:
            continue
        if getattr(user, field) != value:
            setattr(user, field, value)
            changed.append(field)

    if not changed:
        return CommandResult.ok({"user": user, "changed": []})

    if "secondary_email" in changed and user.secondary_email == user.email:
        return CommandResult.fail("Secondary email must differ from the primary email.")

    user.save(update_fields=[*changed, "updated_at"])
    logger.info(
        "Profile updated",
        extra={"sovereign_id": str(user.public_id), "fields": changed},
    )
    return CommandResult.ok({"user": user, "changed": changed})


# =============================================================================
# Rank administration
# =============================================================================

@transaction.atomic
def set_user_rank(actor: ActorContext, target_public_id, rank) -> CommandResult:
    """
    Assign a rank to a user. Admiral only.

    An admiral cannot change its own rank, so the fleet always keeps the
    admiral that made the change.
    """
    require_admiral_rank(actor.sovereign_id)

    new_rank = parse_rank(rank)
    if new_rank is None:
        return CommandResult.fail(f"Unknown rank: {rank!r}")

    try:
        target = User.objects.select_for_update().get(public_id=target_public_id)
    except User.DoesNotExist:
        return CommandResult.fail("User not found.")

    if target.pk == actor.user.pk:
        return CommandResult.fail("You cannot change your own rank.")

    old_rank = target.rank
    if old_rank == new_rank.value:
        return CommandResult.ok({"user": target, "changed": False})

    target.rank = new_rank.value
    target.save(update_fields=["rank", "updated_at"])
    logger.info(
        "Rank changed",
        extra={
            "sovereign_id": str(target.public_id),
            "old_rank": old_rank,
            "new_rank": new_rank.value,
            "by": str(actor.sovereign_id),
        },
    )
    return CommandResult.ok({"user": target, "changed": True})


# =============================================================================
# Invitations
# =============================================================================

@transaction.atomic
def create_invitation(actor: ActorContext, email: str, rank) -> CommandResult:
    """
    Invite an email address to join with a rank.

    Captains and above may invite. Anyone but an admiral may only invite
    ranks strictly below their own.

    Returns:
        CommandResult with the invitation and the provider ticket
    """
    from identity.providers import get_identity_provider

    inviter = require_minimum_rank(actor.sovereign_id, Rank.CAPTAIN)
    inviter_rank = parse_rank(inviter.rank)

    invited_rank = parse_rank(rank)
    if invited_rank is None:
        return CommandResult.fail(f"Unknown rank: {rank!r}")

    if inviter_rank != Rank.ADMIRAL and has_minimum_rank(invited_rank, inviter_rank):
        return CommandResult.fail("You can only invite ranks below your own.")

    email = User.objects.normalize_email(email).lower()
    if User.objects.filter(email__iexact=email).exists():
        return CommandResult.fail("A user with this email already exists.")
    if Invitation.objects.filter(email__iexact=email, status=Invitation.Status.PENDING).exists():
        return CommandResult.fail("An invitation for this email is already pending.")

    invitation = Invitation.objects.create(
        email=email,
        rank=invited_rank.value,
        invited_by=inviter,
    )
    ticket = get_identity_provider().create_invitation(email, invited_rank.value)
    logger.info(
        "Invitation created",
        extra={"invitation": str(invitation.public_id), "rank": invited_rank.value},
    )
    return CommandResult.ok({"invitation": invitation, "ticket": ticket})


@transaction.atomic
def revoke_invitation(actor: ActorContext, invitation_public_id) -> CommandResult:
    """Revoke a pending invitation. Its sender or any admiral may revoke."""
    require_minimum_rank(actor.sovereign_id, Rank.CAPTAIN)
    try:
        invitation = Invitation.objects.select_for_update().get(public_id=invitation_public_id)
    except Invitation.DoesNotExist:
        return CommandResult.fail("Invitation not found.")

    if not actor.is_admiral and invitation.invited_by_id != actor.user.pk:
        return CommandResult.fail("You can only revoke your own invitations.")
    if invitation.status != Invitation.Status.PENDING:
        return CommandResult.fail("Invitation is no longer pending.")

    invitation.status = Invitation.Status.REVOKED
    invitation.save(update_fields=["status"])
    return CommandResult.ok({"invitation": invitation})


def list_invitations(actor: ActorContext):
    """Invitations visible to the actor: all for an admiral, own otherwise."""
    require_minimum_rank(actor.sovereign_id, Rank.CAPTAIN)
    qs = Invitation.objects.select_related("invited_by")
    if actor.is_admiral:
        return qs
    return qs.filter(invited_by=actor.user)


def claim_invitation(email: str):
    """
    Accept the newest pending invitation for email.

    Called by the identity handoff when it creates a new sovereign user.
    Must run inside the handoff's transaction.

    Returns:
        The invited Rank, or None without a pending invitation
    """
    if not email:
        return None
    invitation = (
        Invitation.objects.select_for_update()
        .filter(email__iexact=email, status=Invitation.Status.PENDING)
        .order_by("-created_at")
        .first()
    )
    if invitation is None:
        return None
    invitation.status = Invitation.Status.ACCEPTED
    invitation.accepted_at = timezone.now()
    invitation.save(update_fields=["status", "accepted_at"])
    return parse_rank(invitation.rank)
