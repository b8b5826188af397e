# ranks/manifests/commodore.py
"""
Commodore: portfolio managers running several businesses.

Same routes as Captain; the extra reach (cross-business analytics,
white-label branding) is data scoping, enforced by the data layer.
"""

from ranks.hierarchy import Rank
from ranks.manifests import NavItem, RankManifest
from ranks.routes import ROUTES, flatten_routes

COMMODORE_MANIFEST = RankManifest(
    id=Rank.COMMODORE,
    label="Commodore",
    home=ROUTES["dashboard"],
    allowed=frozenset({
        ROUTES["dashboard"],
        *flatten_routes(ROUTES["productivity"]),
        *flatten_routes(ROUTES["clients"]),
        *flatten_routes(ROUTES["finance"]),
        *flatten_routes(ROUTES["projects"]),
        *flatten_routes(ROUTES["settings"]),
    }),
    nav=(
        NavItem(ROUTES["dashboard"], "Dashboard", "home"),
        NavItem(ROUTES["productivity"]["email"], "Productivity", "briefcase"),
        NavItem(ROUTES["clients"]["contacts"], "Clients", "users"),
        NavItem(ROUTES["finance"]["overview"], "Finance", "dollar-sign"),
        NavItem(ROUTES["projects"]["overview"], "Projects", "folder"),
        NavItem(ROUTES["settings"]["account"], "Settings", "settings"),
    ),
)
