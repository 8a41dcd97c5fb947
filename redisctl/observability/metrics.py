"""Prometheus metrics for tracked remote operations.

Counters and histograms are process-wide; they carry no per-poll state.
Use record_workflow_outcome() once per workflow invocation and
record_poll_fetch() once per status fetch.
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

WORKFLOW_TOTAL = Counter(
    "redisctl_workflow_total",
    "Completed workflow invocations by outcome",
    labelnames=("platform", "kind", "outcome"),
)
POLL_FETCH_TOTAL = Counter(
    "redisctl_poll_fetch_total",
    "Status snapshots fetched while polling",
    labelnames=("platform",),
)
POLL_DURATION = Histogram(
    "redisctl_poll_duration_seconds",
    "Wall-clock time spent polling a remote operation",
    labelnames=("platform", "outcome"),
    buckets=(1, 5, 10, 30, 60, 120, 300, 600, 1200, 1800, 3600),
)


def record_workflow_outcome(platform: str, kind: str, outcome: str) -> None:
    """Count one workflow invocation (outcome: success, failed, timeout, error)."""
    WORKFLOW_TOTAL.labels(platform=platform, kind=kind, outcome=outcome).inc()


def record_poll_fetch(platform: str) -> None:
    POLL_FETCH_TOTAL.labels(platform=platform).inc()


def observe_poll_duration(platform: str, outcome: str, seconds: float) -> None:
    POLL_DURATION.labels(platform=platform, outcome=outcome).observe(seconds)
