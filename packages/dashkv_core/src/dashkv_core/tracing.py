from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor


def setup_tracing(service_name: str, exporter_enabled: bool = True):
    """Registers a global tracer provider for the given service, once per process."""

    if getattr(setup_tracing, "has_run", False):
        return

    provider = TracerProvider(resource=Resource(attributes={SERVICE_NAME: service_name}))

    # Without an exporter spans are still created (and carry trace ids into the logs),
    # they just never leave the process.
    if exporter_enabled:
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter()))

    trace.set_tracer_provider(provider)
    setup_tracing.has_run = True


def get_tracer(module_name: str):
    """Gets a tracer instance for a specific module."""
    return trace.get_tracer(module_name)
