"""Prometheus metrics for the simulator.

Each metric below registers itself in the global REGISTRY on construction.
Nothing is exposed over HTTP unless the CLI is started with --metrics-port,
in which case start_http_server() serves the same registry on /metrics.
"""

from prometheus_client import Counter, Gauge, Histogram, start_http_server

# ---------------------------------------------------------------------------
# Enforcer decisions
# ---------------------------------------------------------------------------
requests_total = Counter(
    "ratesim_requests_total",
    "Requests decided by the enforcer",
    ["client_id", "outcome"],
)
remaining_quota = Gauge(
    "ratesim_remaining_quota",
    "Quota left after the client's latest request",
    ["client_id"],
)

# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------
reports_total = Counter(
    "ratesim_reports_total",
    "Abuse reports produced",
    ["level"],
)
violations_total = Counter(
    "ratesim_violations_total",
    "Violations recorded across all reports",
    ["level"],
)
analysis_seconds = Histogram(
    "ratesim_analysis_seconds",
    "Time spent running the policy pipeline for one client",
    buckets=[0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5],
)


def record_decision(decision) -> None:
    client_id = decision.request.client_id
    requests_total.labels(client_id=client_id,
                          outcome=decision.outcome.value).inc()
    remaining_quota.labels(client_id=client_id).set(decision.remaining_quota)


def record_report(report) -> None:
    level = report.level.name
    reports_total.labels(level=level).inc()
    if report.violations:
        violations_total.labels(level=level).inc(len(report.violations))


def reset_quota(client_id: str, quota: int) -> None:
    remaining_quota.labels(client_id=client_id).set(quota)


def serve(port: int) -> None:
    start_http_server(port)
