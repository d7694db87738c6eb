"""Infrastructure layer - cross-cutting concerns."""

from segment_db.infrastructure.config import Config, get_config
from segment_db.infrastructure.logging import command_context, get_logger, setup_logging
from segment_db.infrastructure.metrics import setup_metrics, get_metrics, MetricsRegistry
from segment_db.infrastructure.tracing import command_span, get_tracer, setup_tracing

__all__ = [
    "Config",
    "get_config",
    "setup_logging",
    "get_logger",
    "command_context",
    "setup_metrics",
    "get_metrics",
    "MetricsRegistry",
    "setup_tracing",
    "get_tracer",
    "command_span",
]
