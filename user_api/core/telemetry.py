"""
OpenTelemetry wiring (traces, metrics and logs exported over OTLP/gRPC).

Nothing is installed when no collector endpoint is configured; the API then
falls back to the no-op providers of opentelemetry-api.
"""
from __future__ import annotations

import logging
from typing import Callable, List

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from user_api import __version__
from user_api.core.config import Settings

METRIC_EXPORT_INTERVAL_MS = 15_000
SERVICE = "user-api"


def build_resource() -> Resource:
    return Resource.create({SERVICE_NAME: SERVICE, SERVICE_VERSION: __version__})


def configure_telemetry(settings: Settings) -> Callable[[], None]:
    """Install global providers for the configured endpoint; return a shutdown hook."""
    endpoint = settings.otel_endpoint
    if not endpoint:
        return lambda: None

    resource = build_resource()
    shutdown_hooks: List[Callable[[], None]] = []

    tracer_provider = TracerProvider(resource=resource)
    tracer_provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint, insecure=True)))
    trace.set_tracer_provider(tracer_provider)
    shutdown_hooks.append(tracer_provider.shutdown)

    reader = PeriodicExportingMetricReader(
        OTLPMetricExporter(endpoint=endpoint, insecure=True),
        export_interval_millis=METRIC_EXPORT_INTERVAL_MS,
    )
    meter_provider = MeterProvider(resource=resource, metric_readers=[reader])
    metrics.set_meter_provider(meter_provider)
    shutdown_hooks.append(meter_provider.shutdown)

    logger_provider = LoggerProvider(resource=resource)
    logger_provider.add_log_record_processor(BatchLogRecordProcessor(OTLPLogExporter(endpoint=endpoint, insecure=True)))
    handler = LoggingHandler(logger_provider=logger_provider)
    logging.getLogger().addHandler(handler)

    def _shutdown_logs() -> None:
        logging.getLogger().removeHandler(handler)
        logger_provider.shutdown()

    shutdown_hooks.append(_shutdown_logs)

    def shutdown() -> None:
        for hook in shutdown_hooks:
            hook()

    return shutdown
