# credentials/handoff.py
"""
Identity Handoff Ceremony.

The ONLY path that turns a verified external identity into a session
credential:

    start
      -> verify-external-identity        (provider)
      -> resolve-or-create-sovereign-user
      -> ensure-identity-mapping          (identity.registry.register)
      -> mint-session
      -> done

Any step failing raises HandoffError tagged with the failed step; nothing
is minted. Resolve and register share one transaction, so a failed
mapping write also rolls back a freshly created user.

The failure tag is for server logs only. HTTP callers show a generic
"session failed" message.
"""

import logging
from dataclasses import dataclass

from django.contrib.auth import get_user_model
from django.db import DatabaseError, transaction
from django.utils import timezone

from accounts.commands import claim_invitation
from credentials import _minting
from credentials.credential import SessionCredential
from credentials.session import profile_fields
from identity import registry
from identity.exceptions import IdentityConflict, IdentityVerificationError
from identity.providers import ExternalIdentity, get_identity_provider
from ops.metrics import record_handoff
from ranks.hierarchy import DEFAULT_RANK

logger = logging.getLogger(__name__)

User = get_user_model()


class HandoffFailure:
    IDENTITY_UNVERIFIED = "identity-unverified"
    USER_RESOLUTION_FAILED = "user-resolution-failed"
    MAPPING_WRITE_FAILED = "mapping-write-failed"
    SESSION_MINT_FAILED = "session-mint-failed"


class HandoffError(Exception):
    def __init__(self, reason: str, detail: str = ""):
        super().__init__(f"{reason}: {detail}" if detail else reason)
        self.reason = reason
        self.detail = detail


@dataclass(frozen=True)
class HandoffResult:
    token: str
    credential: SessionCredential
    created: bool


def _resolve_or_create(identity: ExternalIdentity):
    """Returns (user, created)."""
    sovereign_id = registry.lookup_by_external_id(identity.external_id)
    if sovereign_id is not None:
        user = User.objects.select_for_update().get(public_id=sovereign_id)
        if not user.is_active:
            raise HandoffError(HandoffFailure.USER_RESOLUTION_FAILED, "user is inactive")
        user.last_login = timezone.now()
        user.login_count += 1
        user.save(update_fields=["last_login", "login_count", "updated_at"])
        return user, False

    if not identity.email:
        raise HandoffError(HandoffFailure.USER_RESOLUTION_FAILED, "new identity without email")
    if User.objects.filter(email__iexact=identity.email).exists():
        # Never adopt an unmapped account by email.
        raise HandoffError(HandoffFailure.USER_RESOLUTION_FAILED, "email belongs to an unmapped user")

    rank = claim_invitation(identity.email) or DEFAULT_RANK
    user = User.objects.create_user(
        email=identity.email,
        rank=rank.value,
        email_verified=identity.email_verified,
        first_name=identity.first_name or "",
        last_name=identity.last_name or "",
        avatar_url=identity.avatar_url,
        last_login=timezone.now(),
        login_count=1,
    )
    logger.info(
        "Sovereign user created",
        extra={"sovereign_id": str(user.public_id), "rank": rank.value},
    )
    return user, True


def run_ceremony(identity: ExternalIdentity) -> HandoffResult:
    """Steps after verification. Exposed for callers that verified elsewhere."""
    try:
        with transaction.atomic():
            try:
                user, created = _resolve_or_create(identity)
            except (User.DoesNotExist, DatabaseError, ValueError) as exc:
                raise HandoffError(HandoffFailure.USER_RESOLUTION_FAILED, str(exc)) from exc

            try:
                registry.register(identity.external_id, user.public_id, identity.provider)
            except (IdentityConflict, DatabaseError, ValueError) as exc:
                raise HandoffError(HandoffFailure.MAPPING_WRITE_FAILED, str(exc)) from exc
    except DatabaseError as exc:
        # Commit failure after both steps ran.
        raise HandoffError(HandoffFailure.MAPPING_WRITE_FAILED, str(exc)) from exc

    try:
        token, credential = _minting.mint_credential(
            user.public_id,
            identity.external_id,
            profile_fields(user),
        )
    except Exception as exc:
        raise HandoffError(HandoffFailure.SESSION_MINT_FAILED, str(exc)) from exc

    return HandoffResult(token=token, credential=credential, created=created)


def perform_identity_handoff(request) -> HandoffResult:
    """
    Run the full ceremony for the identity the request carries.

    Raises:
        HandoffError: tagged with the step that failed
    """
    logger.info("Identity handoff started")
    try:
        try:
            identity = get_identity_provider().verify_request(request)
        except IdentityVerificationError as exc:
            raise HandoffError(HandoffFailure.IDENTITY_UNVERIFIED, str(exc)) from exc

        result = run_ceremony(identity)
    except HandoffError as exc:
        logger.warning(
            "Identity handoff failed",
            extra={"reason": exc.reason, "detail": exc.detail},
        )
        record_handoff(exc.reason)
        raise

    logger.info(
        "Identity handoff complete",
        extra={
            "sovereign_id": result.credential.sovereign_id,
            "rank": result.credential.rank,
            "new_user": result.created,
        },
    )
    record_handoff("created" if result.created else "resumed")
    return result
