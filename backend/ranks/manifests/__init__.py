"""Static per-rank manifests. Each module exports exactly one RankManifest."""

from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Tuple

from ranks.hierarchy import Rank


@dataclass(frozen=True)
class NavItem:
    """One entry of a rank's navigation tree."""

    path: str
    label: str
    icon: Optional[str] = None
    badge: Optional[int] = None
    children: Tuple["NavItem", ...] = ()

    def walk(self):
        """Yield this item and every descendant."""
        yield self
        for child in self.children:
            yield from child.walk()

    def as_dict(self) -> dict:
        data = {"path": self.path, "label": self.label, "icon": self.icon}
        if self.badge is not None:
            data["badge"] = self.badge
        if self.children:
            data["children"] = [child.as_dict() for child in self.children]
        return data


@dataclass(frozen=True)
class RankManifest:
    """
    Everything one rank may reach.

    Attributes:
        id: The rank this manifest belongs to
        label: Human readable rank name
        home: Default landing route (must be in allowed)
        allowed: Exact-match route allowlist
        nav: Navigation tree; every path should also be in allowed
    """

    id: Rank
    label: str
    home: str
    allowed: FrozenSet[str]
    nav: Tuple[NavItem, ...] = field(default_factory=tuple)

    def nav_paths(self):
        for item in self.nav:
            for node in item.walk():
                yield node.path

    def as_dict(self) -> dict:
        return {
            "id": self.id.value,
            "label": self.label,
            "home": self.home,
            "allowed": sorted(self.allowed),
            "nav": [item.as_dict() for item in self.nav],
        }
