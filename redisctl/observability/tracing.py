"""OpenTelemetry tracing for workflows and polls.

Nothing is exported unless ``OTEL_EXPORTER_OTLP_ENDPOINT`` is set; without it
the OpenTelemetry API hands out no-op spans and the helpers below cost nothing.

Span layout for one tracked operation::

    workflow.<platform>.<kind>      (trace_workflow)
      └─ poll.<platform>            (poll_span)
           └─ HTTP GET ...          (httpx instrumentation)

Every span carries ``redisctl.category`` so traces can be filtered in
Grafana/Tempo, e.g. ``{span.redisctl.category = "poll"}``.
"""

from __future__ import annotations

import logging
import os
from enum import Enum
from functools import wraps
from typing import Any, Callable, TypeVar

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


class SpanCategory(str, Enum):
    WORKFLOW = "workflow"
    POLL = "poll"


ATTR_CATEGORY = "redisctl.category"
ATTR_PLATFORM = "redisctl.platform"
ATTR_WORKFLOW_KIND = "redisctl.workflow.kind"
ATTR_HANDLE = "redisctl.operation.handle"
ATTR_STATUS = "redisctl.operation.status"
ATTR_FETCHES = "redisctl.poll.fetches"


def setup_tracing(service_name: str, service_version: str = "0.1.0") -> bool:
    """Export spans over OTLP/HTTP when ``OTEL_EXPORTER_OTLP_ENDPOINT`` is set.

    Also instruments httpx so each vendor API request shows up under its poll.
    Returns True if tracing was enabled.
    """
    endpoint = os.environ.get("OTEL_EXPORTER_OTLP_ENDPOINT")
    if not endpoint:
        logger.debug(f"Tracing disabled for {service_name}: OTEL_EXPORTER_OTLP_ENDPOINT not set")
        return False

    provider = TracerProvider(
        resource=Resource.create({"service.name": service_name, "service.version": service_version})
    )
    provider.add_span_processor(
        BatchSpanProcessor(
            OTLPSpanExporter(
                endpoint=endpoint, headers=os.environ.get("OTEL_EXPORTER_OTLP_HEADERS")
            )
        )
    )
    trace.set_tracer_provider(provider)
    HTTPXClientInstrumentor().instrument()

    logger.info(f"Tracing enabled for {service_name}, exporting to {endpoint}")
    return True


def get_tracer(name: str) -> trace.Tracer:
    return trace.get_tracer(name)


def trace_workflow(platform: str, kind: str):
    """Run a vendor workflow coroutine inside a ``workflow.<platform>.<kind>`` span."""

    def decorator(fn: F) -> F:
        tracer = get_tracer(fn.__module__)

        @wraps(fn)
        async def wrapper(*args, **kwargs):
            with tracer.start_as_current_span(
                f"workflow.{platform}.{kind}",
                attributes={
                    ATTR_CATEGORY: SpanCategory.WORKFLOW.value,
                    ATTR_PLATFORM: platform,
                    ATTR_WORKFLOW_KIND: kind,
                },
            ):
                return await fn(*args, **kwargs)

        return wrapper  # type: ignore

    return decorator


def poll_span(platform: str, handle: str):
    """Context manager spanning one poll of ``handle`` until it resolves or times out."""
    return get_tracer("redisctl.core.poller").start_as_current_span(
        f"poll.{platform}",
        attributes={
            ATTR_CATEGORY: SpanCategory.POLL.value,
            ATTR_PLATFORM: platform,
            ATTR_HANDLE: handle,
        },
    )


def add_span_attributes(attrs: dict[str, Any]) -> None:
    """Set ``attrs`` on the current span, skipping None values."""
    span = trace.get_current_span()
    if span and span.is_recording():
        for key, value in attrs.items():
            if value is None:
                continue
            span.set_attribute(key, value)
