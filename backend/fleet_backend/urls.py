from django.contrib import admin
from django.urls import include, path, re_path

from ops.urls import metrics_patterns
from ranks.views import AppShellView

urlpatterns = [
    # Operations endpoints (no auth required)
    path("_health/", include("ops.urls")),
    path("_metrics/", include(metrics_patterns)),

    # Django admin lives off the app's /admin/* rank routes
    path("django-admin/", admin.site.urls),

    # API
    path("api/", include("credentials.urls")),
    path("api/", include("accounts.urls")),
    path("api/", include("vanish.urls")),
    path("api/ranks/", include("ranks.urls")),

    # Everything else is a client-routed page served by the app shell
    re_path(r"^(?!api/|_health/|_metrics/|django-admin/|static/).*$", AppShellView.as_view(), name="app-shell"),
]
