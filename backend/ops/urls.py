# ops/urls.py
"""
Health and metrics routes.

Mounted by fleet_backend.urls at /_health/ and /_metrics/. The Entry
Gate passes both prefixes through, and the views take no credential.
Expose them on the internal network only.
"""
from django.urls import path

from ops.health import FullHealthView, LivenessView, ReadinessView
from ops.metrics import MetricsView

urlpatterns = [
    path("live", LivenessView.as_view(), name="health-live"),
    path("ready", ReadinessView.as_view(), name="health-ready"),
    # Database, identity registry audit, manifest validation
    path("full", FullHealthView.as_view(), name="health-full"),
]

metrics_patterns = [
    path("", MetricsView.as_view(), name="metrics"),
]
