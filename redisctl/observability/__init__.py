"""Observability helpers: Prometheus metrics and OpenTelemetry tracing."""
