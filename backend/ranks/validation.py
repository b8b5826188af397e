# ranks/validation.py
"""
Build-time consistency checks between rank manifests and the router.

Checks:
(a) every dispatchable route is allowlisted for at least one rank   -> error
(b) every allowlisted route has a live view component                -> error
(c) every nav route of a rank is in that rank's allowlist            -> error
(d) dispatchable routes == routes reachable by any rank              -> warning

Overview routes (domain roots that redirect) are exempt from (b), (c)
and (d).

Pure functions over their inputs so the checks can run against the real
registry or a synthetic one.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Mapping, Optional

from ranks.manifests import RankManifest
from ranks.router import VIEW_EXTENSIONS


@dataclass
class ValidationReport:
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def view_exists(component: str, views_dir: Optional[Path]) -> bool:
    """True if component resolves to a file. Without views_dir, trust the table."""
    if views_dir is None:
        return True
    base = Path(views_dir) / component
    return any(base.with_name(base.name + ext).is_file() for ext in VIEW_EXTENSIONS)


def validate_manifests(
    manifests: Iterable[RankManifest],
    view_registry: Mapping[str, str],
    overview_routes: Iterable[str] = (),
    views_dir: Optional[Path] = None,
) -> ValidationReport:
    manifests = list(manifests)
    overview = frozenset(overview_routes)
    report = ValidationReport()

    reachable = set()
    for manifest in manifests:
        reachable |= manifest.allowed

    # (a) dispatchable -> allowlisted somewhere
    for route in sorted(view_registry):
        if route not in reachable:
            report.errors.append(f"Router route '{route}' is not allowlisted for any rank.")

    # (b) allowlisted -> live view
    for manifest in manifests:
        for route in sorted(manifest.allowed - overview):
            component = view_registry.get(route)
            if component is None:
                report.errors.append(
                    f"[{manifest.id.value}] allowlisted route '{route}' has no router view."
                )
            elif not view_exists(component, views_dir):
                report.errors.append(
                    f"[{manifest.id.value}] view '{component}' for '{route}' does not exist."
                )

    # (c) nav -> allowlist
    for manifest in manifests:
        for path in manifest.nav_paths():
            if path in overview:
                continue
            if path not in manifest.allowed:
                report.errors.append(
                    f"[{manifest.id.value}] nav route '{path}' is not in the rank's allowlist."
                )

    # (d) drift, both directions
    dispatchable = set(view_registry)
    for route in sorted((reachable - overview) - dispatchable):
        report.warnings.append(f"Reachable route '{route}' is not dispatchable by the router.")
    for route in sorted(dispatchable - reachable):
        report.warnings.append(f"Router route '{route}' is orphaned (no rank reaches it).")

    return report


def validate_registry(views_dir: Optional[Path] = None) -> ValidationReport:
    """Run every check against the live registry and router table."""
    from ranks.manifest import ALL_MANIFESTS
    from ranks.router import VIEW_REGISTRY
    from ranks.routes import OVERVIEW_ROUTES

    return validate_manifests(ALL_MANIFESTS, VIEW_REGISTRY, OVERVIEW_ROUTES, views_dir)
