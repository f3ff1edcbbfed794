"""OpenTelemetry tracing setup (console or OTLP exporter) and instrumentation."""

import logging
import threading

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.instrumentation.redis import RedisInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter, SpanExporter
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased
from sqlalchemy.ext.asyncio import AsyncEngine

from app.core.config import Settings

logger = logging.getLogger(__name__)


def _build_exporter(exporter_type: str, otlp_endpoint: str | None) -> SpanExporter | None:
    if exporter_type == "none":
        return None
    if exporter_type == "otlp" and otlp_endpoint:
        logger.info("Using OTLP span exporter: %s", otlp_endpoint)
        return OTLPSpanExporter(endpoint=otlp_endpoint, insecure=otlp_endpoint.startswith("http://"))
    if exporter_type != "console":
        logger.warning("Unknown exporter type '%s', using console", exporter_type)
    return ConsoleSpanExporter()


class TelemetryConfig:
    """Tracer provider plus FastAPI, SQLAlchemy, Redis and logging instrumentation."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.enabled = settings.telemetry_enabled
        self.tracer_provider: TracerProvider | None = None

    def setup(self) -> TracerProvider | None:
        """Create and register the global tracer provider. None when disabled."""
        if not self.enabled:
            logger.info("Telemetry disabled")
            return None
        s = self.settings
        resource = Resource(
            attributes={
                SERVICE_NAME: s.app_name,
                SERVICE_VERSION: s.app_version,
                "deployment.environment": s.telemetry_environment,
            }
        )
        provider = TracerProvider(resource=resource, sampler=TraceIdRatioBased(s.telemetry_sample_rate))
        exporter = _build_exporter(s.telemetry_exporter, s.telemetry_otlp_endpoint)
        if exporter is not None:
            provider.add_span_processor(BatchSpanProcessor(exporter))
        trace.set_tracer_provider(provider)
        self.tracer_provider = provider
        logger.info(
            "OpenTelemetry initialized: service=%s, exporter=%s",
            s.app_name,
            s.telemetry_exporter,
        )
        return provider

    @property
    def active(self) -> bool:
        return self.enabled and self.tracer_provider is not None

    def instrument_fastapi(self, app: FastAPI) -> None:
        if self.active:
            FastAPIInstrumentor.instrument_app(
                app,
                tracer_provider=self.tracer_provider,
                excluded_urls="/api/v1/health",
            )

    def instrument_sqlalchemy(self, engine: AsyncEngine) -> None:
        if self.active:
            SQLAlchemyInstrumentor().instrument(
                engine=engine.sync_engine,
                tracer_provider=self.tracer_provider,
            )

    def instrument_redis(self) -> None:
        if self.active:
            RedisInstrumentor().instrument(tracer_provider=self.tracer_provider)

    def instrument_logging(self) -> None:
        """Inject trace_id/span_id into log records."""
        if self.active:
            LoggingInstrumentor().instrument(tracer_provider=self.tracer_provider, set_logging_format=True)

    def shutdown(self) -> None:
        """Flush remaining spans."""
        if self.tracer_provider is not None:
            self.tracer_provider.shutdown()
            logger.info("Telemetry shutdown complete")


_telemetry: TelemetryConfig | None = None
_telemetry_lock = threading.RLock()


def get_telemetry() -> TelemetryConfig | None:
    """Return the global telemetry instance (set at startup)."""
    with _telemetry_lock:
        return _telemetry


def set_telemetry(telemetry: TelemetryConfig | None) -> None:
    """Set (or clear) the global telemetry instance."""
    global _telemetry
    with _telemetry_lock:
        _telemetry = telemetry
