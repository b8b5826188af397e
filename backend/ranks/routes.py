# ranks/routes.py
"""
Canonical domain routes, defined once.

Manifests and navigation trees reference ROUTES rather than string
literals so a renamed route cannot drift between allowlist and nav.
"""

ROUTES = {
    # Dashboard lives at the root
    "dashboard": "/",

    # Admin domain (Admiral only)
    "admin": {
        "showcase": "/admin/showcase",
        "plans": "/admin/plans",
        "users": "/admin/users",
    },

    # Clients domain
    "clients": {
        "overview": "/clients",
        "contacts": "/clients/contacts",
        "pipeline": "/clients/pipeline",
        "reports": "/clients/reports",
        "sessions": "/clients/sessions",
        "teams": "/clients/teams",
    },

    # Finance domain
    "finance": {
        "root": "/finance",
        "overview": "/finance/overview",
        "invoices": "/finance/invoices",
        "payments": "/finance/payments",
    },

    # Projects domain
    "projects": {
        "overview": "/projects",
        "charts": "/projects/charts",
        "locations": "/projects/locations",
        "tracking": "/projects/tracking",
    },

    # Settings domain (all ranks)
    "settings": {
        "overview": "/settings",
        "account": "/settings/account",
        "billing": "/settings/billing",
        "preferences": "/settings/preferences",
        "plan": "/settings/plan",
        "security": "/settings/security",
    },

    # System domain (Admiral only)
    "system": {
        "overview": "/system",
        "ai": "/system/ai",
        "ranks": "/system/ranks",
    },

    # Productivity domain
    "productivity": {
        "overview": "/productivity",
        "bookings": "/productivity/bookings",
        "calendar": "/productivity/calendar",
        "email": "/productivity/email",
        "meetings": "/productivity/meetings",
    },
}

# Domain roots that redirect to a default sub-route instead of rendering
# their own view. Exempt from the "has a live view" manifest check.
OVERVIEW_ROUTES = frozenset({
    "/productivity",
    "/clients",
    "/finance",
    "/projects",
    "/system",
    "/settings",
})


def flatten_routes(group: dict) -> tuple:
    """All route strings of one domain group, in declaration order."""
    return tuple(group.values())
