"""OpenTelemetry tracing setup.

When an OTLP endpoint is configured, spans are exported over OTLP/HTTP and
outgoing httpx requests (Supabase and Upstash both use httpx) are traced.
Without an endpoint nothing is installed and ``get_tracer`` hands out the
OpenTelemetry API's no-op tracer.
"""

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from chronos.config import Settings
from chronos.logging import get_logger

logger = get_logger(__name__)

SERVICE_NAME = "chronos-storefront"
SERVICE_VERSION = "1.0.0"


def _parse_headers(raw: str) -> dict[str, str]:
    """Parse ``key=value,key2=value2`` (the OTEL_EXPORTER_OTLP_HEADERS format)."""
    headers = {}
    for pair in raw.split(","):
        key, sep, value = pair.partition("=")
        if sep and key.strip():
            headers[key.strip()] = value.strip()
    return headers


def setup_tracing(settings: Settings) -> bool:
    """Install the tracer provider and httpx instrumentation.

    Args:
        settings: Runtime settings carrying the OTLP endpoint

    Returns:
        True if tracing was enabled
    """
    if not settings.tracing_enabled:
        logger.info("Tracing disabled: set OTEL_EXPORTER_OTLP_ENDPOINT to enable")
        return False

    try:
        resource = Resource.create(
            {
                "service.name": SERVICE_NAME,
                "service.version": SERVICE_VERSION,
                "deployment.environment": settings.environment,
            },
        )
        provider = TracerProvider(resource=resource)
        provider.add_span_processor(
            BatchSpanProcessor(
                OTLPSpanExporter(
                    endpoint=settings.otlp_endpoint,
                    headers=_parse_headers(settings.otlp_headers),
                ),
            ),
        )
        trace.set_tracer_provider(provider)
        HTTPXClientInstrumentor().instrument()
    except Exception as e:
        logger.error(f"Failed to set up tracing: {e}", exc_info=True)
        logger.warning("Continuing without tracing")
        return False

    logger.info(f"Tracing enabled, exporting to {settings.otlp_endpoint[:50]}")
    return True


def get_tracer(name: str) -> trace.Tracer:
    """Get a tracer for manual spans (no-op until ``setup_tracing`` runs)."""
    return trace.get_tracer(name)
