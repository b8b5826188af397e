"""
Prometheus metrics endpoint.

Exposes application metrics in Prometheus format for scraping.

Metrics exposed:
- fleet_handoff_total: Identity handoff outcomes (created, resumed, or failure tag)
- fleet_gate_decisions_total: Entry Gate decisions by outcome and enforcement mode
- fleet_credential_refresh_total: Credential refresh outcomes
- fleet_request_duration_seconds: HTTP request duration histogram
- fleet_active_requests: Requests currently being processed
- fleet_users_by_rank: Active sovereign users per rank
"""
import logging
import re
import time

from django.http import HttpResponse
from django.views import View
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest

logger = logging.getLogger(__name__)

HANDOFF_TOTAL = Counter(
    "fleet_handoff_total",
    "Identity handoff ceremonies by outcome",
    ["outcome"],
)

GATE_DECISIONS = Counter(
    "fleet_gate_decisions_total",
    "Entry Gate decisions on gated page loads",
    ["decision", "mode"],
)

CREDENTIAL_REFRESH = Counter(
    "fleet_credential_refresh_total",
    "Entry Gate credential refresh outcomes",
    ["outcome"],
)

REQUEST_DURATION = Histogram(
    "fleet_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint", "status"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

ACTIVE_REQUESTS = Gauge(
    "fleet_active_requests",
    "Number of requests currently being processed",
)

USERS_BY_RANK = Gauge(
    "fleet_users_by_rank",
    "Active sovereign users per rank",
    ["rank"],
)

_UUID_SEGMENT = re.compile(r"/[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}")
_INT_SEGMENT = re.compile(r"/\d+(?=/|$)")


def record_handoff(outcome: str) -> None:
    HANDOFF_TOTAL.labels(outcome=outcome).inc()


def record_gate_decision(decision: str, mode: str) -> None:
    GATE_DECISIONS.labels(decision=decision, mode=mode).inc()


def record_refresh(outcome: str) -> None:
    CREDENTIAL_REFRESH.labels(outcome=outcome).inc()


def collect_metrics():
    """Collect gauge values that come from the database."""
    from django.db.models import Count

    from accounts.models import User
    from ranks.hierarchy import Rank

    counts = {rank.value: 0 for rank in Rank}
    counts["unassigned"] = 0
    rows = User.objects.filter(is_active=True).values("rank").annotate(n=Count("id"))
    for row in rows:
        counts[row["rank"] or "unassigned"] = row["n"]
    for rank, n in counts.items():
        USERS_BY_RANK.labels(rank=rank).set(n)


def get_prometheus_response():
    """Generate Prometheus metrics response."""
    try:
        collect_metrics()
    except Exception as e:
        # Counters still scrape without the database.
        logger.error(f"Error collecting metrics: {e}")

    return HttpResponse(generate_latest(), content_type=CONTENT_TYPE_LATEST)


class MetricsView(View):
    """
    Prometheus metrics endpoint.

    Exposes metrics in Prometheus format at /_metrics.
    Should be protected in production (internal network only).
    """

    def get(self, request):
        return get_prometheus_response()


def normalize_endpoint(path: str) -> str:
    """Collapse ids in a path for label cardinality control."""
    path = _UUID_SEGMENT.sub("/{uuid}", path)
    path = _INT_SEGMENT.sub("/{id}", path)
    return path[:50]


def track_request_metrics(get_response):
    """
    Middleware to track request duration metrics.

    Add to MIDDLEWARE after SecurityMiddleware:
        "ops.metrics.track_request_metrics",
    """

    def middleware(request):
        start = time.time()
        ACTIVE_REQUESTS.inc()
        status = 500

        try:
            response = get_response(request)
            status = response.status_code
            return response
        finally:
            ACTIVE_REQUESTS.dec()
            REQUEST_DURATION.labels(
                method=request.method,
                endpoint=normalize_endpoint(request.path),
                status=f"{status // 100}xx",
            ).observe(time.time() - start)

    return middleware
