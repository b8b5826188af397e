# ranks/hierarchy.py
"""
Rank hierarchy and pure comparison helpers.

Hierarchy: Admiral > Commodore > Captain > Crew

CRITICAL: Ranks are compared by integer level, never by string order
("admiral" < "crew" lexically).

Every helper is total and fails closed:
- None / missing rank never satisfies any check
- A value outside the enumeration is treated exactly like a missing rank
"""

from typing import Optional

from django.db import models


class Rank(models.TextChoices):
    CREW = "crew", "Crew"
    CAPTAIN = "captain", "Captain"
    COMMODORE = "commodore", "Commodore"
    ADMIRAL = "admiral", "Admiral"


RANK_HIERARCHY = {
    Rank.CREW: 0,
    Rank.CAPTAIN: 1,
    Rank.COMMODORE: 2,
    Rank.ADMIRAL: 3,
}

# Level reported for a missing or unrecognised rank.
NO_RANK_LEVEL = -1

LOWEST_RANK = Rank.CREW

# Rank given to a sovereign user created without an invitation.
DEFAULT_RANK = Rank.CREW

RANK_METADATA = {
    Rank.CREW: {
        "description": "Team Members",
        "tagline": "Basic access to essential features",
    },
    Rank.CAPTAIN: {
        "description": "Business Owners",
        "tagline": "Full feature access and team management",
    },
    Rank.COMMODORE: {
        "description": "Portfolio Managers",
        "tagline": "Multi-organization oversight and management",
    },
    Rank.ADMIRAL: {
        "description": "Platform Administrators",
        "tagline": "System-level control of the whole fleet",
    },
}


def parse_rank(value) -> Optional[Rank]:
    """
    Coerce a raw value to a Rank.

    Returns None for None, empty strings and anything outside the
    enumeration. Never raises.
    """
    if value is None:
        return None
    if isinstance(value, Rank):
        return value
    try:
        return Rank(value)
    except ValueError:
        return None


def rank_level(value) -> int:
    """Integer level for a rank, NO_RANK_LEVEL when absent or unknown."""
    rank = parse_rank(value)
    if rank is None:
        return NO_RANK_LEVEL
    return RANK_HIERARCHY[rank]


def has_minimum_rank(user_rank, required_rank) -> bool:
    """
    Check if user_rank meets or exceeds required_rank.

    Example:
        has_minimum_rank("captain", "crew")   # True
        has_minimum_rank("crew", "captain")   # False
        has_minimum_rank(None, "crew")        # False
    """
    user = parse_rank(user_rank)
    required = parse_rank(required_rank)
    if user is None or required is None:
        return False
    return RANK_HIERARCHY[user] >= RANK_HIERARCHY[required]


def has_exact_rank(user_rank, target_rank) -> bool:
    user = parse_rank(user_rank)
    return user is not None and user == parse_rank(target_rank)


def is_admiral(user_rank) -> bool:
    return has_exact_rank(user_rank, Rank.ADMIRAL)


def is_commodore_or_higher(user_rank) -> bool:
    return has_minimum_rank(user_rank, Rank.COMMODORE)


def is_captain_or_higher(user_rank) -> bool:
    return has_minimum_rank(user_rank, Rank.CAPTAIN)


def is_crew(user_rank) -> bool:
    return has_exact_rank(user_rank, Rank.CREW)


def can_control_fleet(user_rank) -> bool:
    """Fleet control (platform administration) is Admiral only."""
    return is_admiral(user_rank)


def can_manage_users(user_rank) -> bool:
    return is_commodore_or_higher(user_rank)


def can_moderate_content(user_rank) -> bool:
    return is_captain_or_higher(user_rank)


def get_rank_display(user_rank) -> dict:
    """Display information for badges and rank tables."""
    rank = parse_rank(user_rank)
    if rank is None:
        return {
            "rank": None,
            "display_name": "Unknown",
            "level": NO_RANK_LEVEL,
            "badge_url": None,
        }
    return {
        "rank": rank.value,
        "display_name": rank.label,
        "level": RANK_HIERARCHY[rank],
        "badge_url": f"/images/rank/{rank.value}.png",
        **RANK_METADATA[rank],
    }
