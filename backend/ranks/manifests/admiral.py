# ranks/manifests/admiral.py
"""
Admiral: platform administrators.

System administration, user management across all ranks, platform
settings. Business domains are deliberately absent.
"""

from ranks.hierarchy import Rank
from ranks.manifests import NavItem, RankManifest
from ranks.routes import ROUTES, flatten_routes

ADMIRAL_MANIFEST = RankManifest(
    id=Rank.ADMIRAL,
    label="Admiral",
    home=ROUTES["dashboard"],
    allowed=frozenset({
        ROUTES["dashboard"],
        *flatten_routes(ROUTES["admin"]),
        *flatten_routes(ROUTES["system"]),
        *flatten_routes(ROUTES["settings"]),
    }),
    nav=(
        NavItem(ROUTES["dashboard"], "Dashboard", "home"),
        NavItem(ROUTES["admin"]["users"], "Users", "users"),
        NavItem(ROUTES["admin"]["plans"], "Plans", "layers"),
        NavItem(ROUTES["admin"]["showcase"], "Showcase", "flag"),
        NavItem(ROUTES["system"]["ai"], "AI System", "cpu"),
        NavItem(ROUTES["system"]["ranks"], "Ranks", "shield"),
        NavItem(ROUTES["settings"]["account"], "Account", "user"),
        NavItem(ROUTES["settings"]["preferences"], "Preferences", "settings"),
    ),
)
