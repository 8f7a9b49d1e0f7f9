"""Observability Module.

- OpenTelemetry tracing (OTLP export, httpx instrumentation)
- Failure reporting for degraded operations
"""

from .reporter import FailureReporter
from .tracing import get_tracer, setup_tracing

__all__ = ["FailureReporter", "get_tracer", "setup_tracing"]
