# accounts/authz.py
"""
Rank guards: the data-layer authorization boundary.

Provides:
- ActorContext: Immutable context for the current request
- resolve_actor: Extract actor context from request
- require_admiral_rank / require_minimum_rank: raise unless granted
- is_admiral / get_user_rank: non-throwing variants
- DRF permission classes built on the guards

CRITICAL: Every guard takes a SOVEREIGN ID, never a rank claim, and
re-reads the rank from the database. The rank inside a session credential
or a request payload is a cache and is never trusted here.
"""

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from django.core.exceptions import ValidationError
from rest_framework import permissions
from rest_framework.exceptions import AuthenticationFailed, NotAuthenticated, PermissionDenied

from accounts.models import User
from ranks.hierarchy import Rank, has_minimum_rank, parse_rank

logger = logging.getLogger(__name__)


class InsufficientRank(PermissionDenied):
    default_detail = "Your rank does not allow this action."
    default_code = "insufficient_rank"


class RankNotAssigned(PermissionDenied):
    default_detail = "No rank has been assigned to this account."
    default_code = "rank_not_assigned"


class SovereignUserNotFound(AuthenticationFailed):
    """
    The sovereign id no longer resolves to a user.

    Not an authorization failure: the client reacts by calling
    /api/session/invalidate.
    """

    default_detail = "Sovereign user not found."
    default_code = "sovereign_user_not_found"


@dataclass(frozen=True)
class ActorContext:
    """
    Immutable context for the current actor.

    Attributes:
        user: The freshly loaded sovereign user
        rank: Rank read from the database with the user (None if unassigned)
    """
    user: User
    rank: Optional[Rank]

    @property
    def sovereign_id(self) -> UUID:
        return self.user.public_id

    def has_minimum(self, minimum) -> bool:
        return has_minimum_rank(self.rank, minimum)

    @property
    def is_admiral(self) -> bool:
        return self.rank == Rank.ADMIRAL


def load_sovereign_user(sovereign_id) -> User:
    """
    Fresh lookup of a sovereign user.

    Raises:
        SovereignUserNotFound: unknown or malformed id
    """
    try:
        return User.objects.get(public_id=sovereign_id, is_active=True)
    except (User.DoesNotExist, ValidationError, ValueError):
        raise SovereignUserNotFound()


def require_minimum_rank(sovereign_id, minimum) -> User:
    """
    Require that the sovereign user holds at least `minimum`.

    Returns the loaded user so callers do not look it up twice.

    Raises:
        SovereignUserNotFound: no such user
        RankNotAssigned: user has no (recognised) rank
        InsufficientRank: rank is below minimum
    """
    user = load_sovereign_user(sovereign_id)
    rank = parse_rank(user.rank)
    if rank is None:
        logger.warning(
            "Rank guard: no rank assigned",
            extra={"sovereign_id": str(user.public_id), "required": str(minimum)},
        )
        raise RankNotAssigned()
    if not has_minimum_rank(rank, minimum):
        logger.info(
            "Rank guard: insufficient rank",
            extra={
                "sovereign_id": str(user.public_id),
                "rank": rank.value,
                "required": str(minimum),
            },
        )
        raise InsufficientRank(f"Requires rank {minimum} or higher.")
    return user


def require_admiral_rank(sovereign_id) -> User:
    """Require the sovereign user to be exactly Admiral."""
    return require_minimum_rank(sovereign_id, Rank.ADMIRAL)


def get_user_rank(sovereign_id) -> Optional[Rank]:
    """Current rank of a sovereign user, None if unknown or unassigned."""
    try:
        user = load_sovereign_user(sovereign_id)
    except SovereignUserNotFound:
        return None
    return parse_rank(user.rank)


def is_admiral(sovereign_id) -> bool:
    return get_user_rank(sovereign_id) == Rank.ADMIRAL


def get_users_by_rank(rank):
    """Users holding exactly `rank` (served by the user_by_rank index)."""
    parsed = parse_rank(rank)
    if parsed is None:
        return User.objects.none()
    return User.objects.filter(rank=parsed.value, is_active=True).order_by("email")


def resolve_actor(request) -> ActorContext:
    """
    Extract ActorContext from the current request.

    Reloads the user by sovereign id so the rank is whatever the
    database says now, not whatever the credential cached.

    Raises:
        NotAuthenticated: no authenticated user on the request
        SovereignUserNotFound: the user was deleted since the credential was minted
    """
    user = getattr(request, "user", None)
    if not user or not user.is_authenticated:
        raise NotAuthenticated("Authentication required.")

    fresh = load_sovereign_user(user.public_id)
    return ActorContext(user=fresh, rank=parse_rank(fresh.rank))


# =============================================================================
# DRF permission classes
# =============================================================================

class RankRequired(permissions.BasePermission):
    """
    Grant access when the caller's stored rank is at least minimum_rank.

    Raises the guard's own exception so the client sees the distinct
    rank_not_assigned / insufficient_rank codes.
    """

    minimum_rank = Rank.CREW

    def has_permission(self, request, view):
        user = getattr(request, "user", None)
        if not user or not user.is_authenticated:
            return False
        require_minimum_rank(user.public_id, self.minimum_rank)
        return True


class IsCaptainOrHigher(RankRequired):
    minimum_rank = Rank.CAPTAIN


class IsCommodoreOrHigher(RankRequired):
    minimum_rank = Rank.COMMODORE


class IsAdmiral(RankRequired):
    minimum_rank = Rank.ADMIRAL
