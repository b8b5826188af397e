# ranks/router.py
"""
Dispatch table of the client-side router.

Maps every route the single-page router can render to the view component
that renders it (path relative to the frontend views directory, no
extension). The client fetches nothing from here at runtime; the table
exists so validate_manifest can prove manifests and router agree.
"""

VIEW_REGISTRY = {
    "/": "Dashboard",

    "/admin/users": "admin/Users",
    "/admin/plans": "admin/Plans",
    "/admin/showcase": "admin/Showcase",

    "/clients/contacts": "clients/Contacts",
    "/clients/teams": "clients/Teams",
    "/clients/sessions": "clients/Sessions",
    "/clients/pipeline": "clients/Pipeline",
    "/clients/reports": "clients/Reports",

    "/finance/overview": "finance/Overview",
    "/finance/invoices": "finance/Invoices",
    "/finance/payments": "finance/Payments",

    "/productivity/calendar": "productivity/Calendar",
    "/productivity/bookings": "productivity/Bookings",
    "/productivity/email": "productivity/Email",
    "/productivity/meetings": "productivity/Meetings",

    "/projects/charts": "projects/Charts",
    "/projects/locations": "projects/Locations",
    "/projects/tracking": "projects/Tracking",

    "/system/ai": "system/AI",
    "/system/ranks": "system/Ranks",

    "/settings/account": "settings/Account",
    "/settings/preferences": "settings/Preferences",
    "/settings/security": "settings/Security",
    "/settings/billing": "settings/Billing",
    "/settings/plan": "settings/Plan",
}

VIEW_EXTENSIONS = (".tsx", ".ts", ".jsx", ".js")
