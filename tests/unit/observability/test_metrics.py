"""Tests for the operation-tracking Prometheus metrics."""

from prometheus_client import REGISTRY

from redisctl.observability.metrics import (
    observe_poll_duration,
    record_poll_fetch,
    record_workflow_outcome,
)


def _value(name, labels):
    return REGISTRY.get_sample_value(name, labels) or 0.0


class TestMetrics:
    def test_workflow_outcome_counter(self):
        labels = {"platform": "cloud", "kind": "create", "outcome": "success"}
        before = _value("redisctl_workflow_total", labels)

        record_workflow_outcome("cloud", "create", "success")

        assert _value("redisctl_workflow_total", labels) == before + 1

    def test_poll_fetch_counter(self):
        labels = {"platform": "enterprise"}
        before = _value("redisctl_poll_fetch_total", labels)

        record_poll_fetch("enterprise")
        record_poll_fetch("enterprise")

        assert _value("redisctl_poll_fetch_total", labels) == before + 2

    def test_poll_duration_histogram(self):
        labels = {"platform": "cloud", "outcome": "timeout"}
        before = _value("redisctl_poll_duration_seconds_count", labels)

        observe_poll_duration("cloud", "timeout", 42.0)

        assert _value("redisctl_poll_duration_seconds_count", labels) == before + 1
