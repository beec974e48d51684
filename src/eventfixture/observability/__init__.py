"""
Observability utilities for eventfixture.

Tracing for command dispatch, and the standard span attributes.
OpenTelemetry is an optional dependency; everything here degrades to
no-ops when it is not installed.

Example:
    >>> from eventfixture.observability import create_tracer, MockTracer
    >>> tracer = create_tracer(__name__, enable_tracing=False)
    >>> tracer.enabled
    False
"""

from eventfixture.observability.attributes import (
    ATTR_AGGREGATE_ID,
    ATTR_AGGREGATE_TYPE,
    ATTR_COMMAND_ID,
    ATTR_COMMAND_TYPE,
    ATTR_ERROR_TYPE,
    ATTR_EVENT_COUNT,
    ATTR_HANDLER_NAME,
    ATTR_OUTCOME,
)
from eventfixture.observability.tracer import (
    MockTracer,
    NullTracer,
    OpenTelemetryTracer,
    Tracer,
    create_tracer,
)
from eventfixture.observability.tracing import (
    OTEL_AVAILABLE,
    get_tracer,
    should_trace,
)

__all__ = [
    # Tracing utilities
    "OTEL_AVAILABLE",
    "get_tracer",
    "should_trace",
    # Tracer (composition-based API)
    "Tracer",
    "NullTracer",
    "OpenTelemetryTracer",
    "MockTracer",
    "create_tracer",
    # Attributes
    "ATTR_AGGREGATE_ID",
    "ATTR_AGGREGATE_TYPE",
    "ATTR_COMMAND_ID",
    "ATTR_COMMAND_TYPE",
    "ATTR_HANDLER_NAME",
    "ATTR_EVENT_COUNT",
    "ATTR_OUTCOME",
    "ATTR_ERROR_TYPE",
]
