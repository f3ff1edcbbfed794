"""Shared telemetry: logging setup, OpenTelemetry config, and tracing helpers."""

from app.shared.telemetry.logging import setup_logging
from app.shared.telemetry.telemetry import TelemetryConfig, get_telemetry, set_telemetry
from app.shared.telemetry.tracing import (
    add_span_attributes,
    traced,
)

__all__ = [
    "TelemetryConfig",
    "add_span_attributes",
    "get_telemetry",
    "set_telemetry",
    "setup_logging",
    "traced",
]
