# ranks/manifests/crew.py
"""
Crew: team members with limited, focused access.

Dashboard and personal settings only. No financial data, no
administrative functions.
"""

from ranks.hierarchy import Rank
from ranks.manifests import NavItem, RankManifest
from ranks.routes import ROUTES, flatten_routes

CREW_MANIFEST = RankManifest(
    id=Rank.CREW,
    label="Crew",
    home=ROUTES["dashboard"],
    allowed=frozenset({
        ROUTES["dashboard"],
        *flatten_routes(ROUTES["settings"]),
    }),
    nav=(
        NavItem(ROUTES["dashboard"], "Dashboard", "home"),
        NavItem(ROUTES["settings"]["account"], "Account", "user"),
        NavItem(ROUTES["settings"]["preferences"], "Preferences", "settings"),
    ),
)
