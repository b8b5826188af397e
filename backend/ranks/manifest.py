# ranks/manifest.py
"""
Route manifest registry - the single source of truth for which rank may
reach which page.

Assembled once at import from the four static manifests. Read-only at
runtime.

Used by:
- credentials.middleware.EntryGateMiddleware (initial page loads)
- ranks.views (navigation API, app shell hydration)
- ranks.validation (build-time checks)

Route matching is EXACT: every reachable path is listed explicitly.
No prefixes, no globs.
"""

from types import MappingProxyType
from typing import FrozenSet, Tuple

from django.core.exceptions import ImproperlyConfigured

from ranks.hierarchy import LOWEST_RANK, Rank, parse_rank
from ranks.manifests import NavItem, RankManifest
from ranks.manifests.admiral import ADMIRAL_MANIFEST
from ranks.manifests.captain import CAPTAIN_MANIFEST
from ranks.manifests.commodore import COMMODORE_MANIFEST
from ranks.manifests.crew import CREW_MANIFEST


def _build_registry(*manifests: RankManifest):
    registry = {}
    for manifest in manifests:
        if manifest.id in registry:
            raise ImproperlyConfigured(f"Duplicate manifest for rank '{manifest.id}'.")
        if manifest.home not in manifest.allowed:
            raise ImproperlyConfigured(
                f"Home route '{manifest.home}' of rank '{manifest.id}' is not in its allowlist."
            )
        registry[manifest.id] = manifest

    missing = [rank for rank in Rank if rank not in registry]
    if missing:
        raise ImproperlyConfigured(
            f"Ranks without a manifest: {', '.join(r.value for r in missing)}"
        )
    return MappingProxyType(registry)


MANIFESTS = _build_registry(
    ADMIRAL_MANIFEST,
    COMMODORE_MANIFEST,
    CAPTAIN_MANIFEST,
    CREW_MANIFEST,
)

ALL_MANIFESTS: Tuple[RankManifest, ...] = tuple(MANIFESTS[rank] for rank in Rank)


def is_route_allowed(rank, path: str) -> bool:
    """
    Check if a rank may load a route.

    Returns False for a missing or unrecognised rank.
    """
    parsed = parse_rank(rank)
    if parsed is None:
        return False
    return path in MANIFESTS[parsed].allowed


def get_rank_home(rank) -> str:
    """Home route for a rank; unrecognised ranks get the lowest rank's home."""
    parsed = parse_rank(rank)
    if parsed is None:
        return MANIFESTS[LOWEST_RANK].home
    return MANIFESTS[parsed].home


def get_rank_nav(rank) -> Tuple[NavItem, ...]:
    parsed = parse_rank(rank)
    if parsed is None:
        return ()
    return MANIFESTS[parsed].nav


def get_manifest(rank) -> RankManifest:
    """
    Complete manifest for a rank.

    Raises:
        ValueError: If rank is not a member of the enumeration. Every real
            rank has a manifest (checked when the registry is built).
    """
    return MANIFESTS[Rank(rank)]


def all_manifest_routes() -> FrozenSet[str]:
    """Every route reachable by at least one rank."""
    routes = set()
    for manifest in ALL_MANIFESTS:
        routes |= manifest.allowed
    return frozenset(routes)
