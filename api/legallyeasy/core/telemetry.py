"""
Tracing for the flows and the LLM client.

Spans are exported to Application Insights when a connection string is
configured; otherwise they stay in-process. The provider is shut down with
the application so batched spans are flushed.
"""

import logging

from azure.monitor.opentelemetry.exporter import AzureMonitorTraceExporter
from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from legallyeasy.core.config import Settings

logger = logging.getLogger(__name__)

SERVICE_NAME = "legallyeasy-api"
SERVICE_VERSION = "0.1.0"

_provider: TracerProvider | None = None


def setup_telemetry(settings: Settings) -> TracerProvider:
    """Install a tracer provider tagged with the service and model deployment."""
    global _provider

    resource = Resource.create(
        {
            "service.name": SERVICE_NAME,
            "service.version": SERVICE_VERSION,
            "llm.deployment": settings.azure_openai_chat_deployment,
        }
    )
    provider = TracerProvider(resource=resource)

    if settings.applicationinsights_connection_string:
        exporter = AzureMonitorTraceExporter(
            connection_string=settings.applicationinsights_connection_string
        )
        provider.add_span_processor(BatchSpanProcessor(exporter))
        logger.info("Exporting traces to Application Insights.")
    else:
        logger.info("Trace export disabled (no Application Insights connection string).")

    trace.set_tracer_provider(provider)
    _provider = provider
    return provider


def shutdown_telemetry() -> None:
    """Flush and close the provider installed by setup_telemetry, if any."""
    global _provider
    if _provider is None:
        return
    _provider.shutdown()
    _provider = None


def get_tracer() -> trace.Tracer:
    """Tracer for this service; a no-op proxy until setup_telemetry runs."""
    return trace.get_tracer(SERVICE_NAME, SERVICE_VERSION)
