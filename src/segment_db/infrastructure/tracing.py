"""OpenTelemetry tracing for the segment store.

Every command runs inside one span named ``segment_db.<kind>`` carrying the
tables it touches. Engine errors mark the span as failed and name the error
class. A cancelled scan is not a failure: the span only records that it
was cancelled.

Spans are exported over OTLP when an endpoint is configured and can be
echoed to the console for debugging. Without ``setup_tracing`` the global
no-op provider is used and spans cost next to nothing.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Sequence

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.trace import Status, StatusCode

from segment_db.domain.errors import QueryCancelled, SegmentDbError

TRACER_NAME = "segment_db"

ATTR_COMMAND = "segment_db.command"
ATTR_TABLES = "segment_db.tables"
ATTR_ROWS = "segment_db.rows"
ATTR_ERROR = "segment_db.error"
ATTR_CANCELLED = "segment_db.cancelled"

_tracer: trace.Tracer | None = None


def build_tracer_provider(
    service_name: str = TRACER_NAME,
    otlp_endpoint: str | None = None,
    console_export: bool = False,
) -> TracerProvider:
    """Create a provider tagged with the service name and package version."""
    from segment_db import __version__

    provider = TracerProvider(
        resource=Resource.create(
            {
                "service.name": service_name,
                "service.version": __version__,
            }
        )
    )
    if otlp_endpoint:
        provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True))
        )
    if console_export:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
    return provider


def setup_tracing(
    service_name: str = TRACER_NAME,
    otlp_endpoint: str | None = None,
    console_export: bool = False,
) -> trace.Tracer:
    """
    Install a provider globally and return the command tracer.

    Args:
        service_name: Service name reported with every span
        otlp_endpoint: OTLP collector endpoint (e.g., "http://localhost:4317")
        console_export: Whether to also print finished spans

    Returns:
        The tracer used for command spans
    """
    global _tracer

    trace.set_tracer_provider(
        build_tracer_provider(service_name, otlp_endpoint, console_export)
    )
    _tracer = trace.get_tracer(TRACER_NAME)
    return _tracer


def get_tracer() -> trace.Tracer:
    """Get the command tracer, falling back to the global provider."""
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer(TRACER_NAME)
    return _tracer


@contextmanager
def command_span(
    kind: str,
    tables: Sequence[str],
    tracer: trace.Tracer | None = None,
) -> Iterator[trace.Span]:
    """
    Run the block inside a span for one command.

    Args:
        kind: Command kind ('insert', 'select' or 'delete')
        tables: Tables named by the command
        tracer: Tracer to use (default: ``get_tracer()``)

    Yields:
        The span, so the caller can add result attributes
    """
    tracer = tracer or get_tracer()
    with tracer.start_as_current_span(
        f"segment_db.{kind}",
        attributes={ATTR_COMMAND: kind, ATTR_TABLES: list(tables)},
        record_exception=False,
        set_status_on_exception=False,
    ) as span:
        try:
            yield span
        except QueryCancelled:
            span.set_attribute(ATTR_CANCELLED, True)
            raise
        except SegmentDbError as e:
            span.set_attribute(ATTR_ERROR, type(e).__name__)
            span.set_status(Status(StatusCode.ERROR, str(e)))
            raise
        except Exception as e:
            span.record_exception(e)
            span.set_status(Status(StatusCode.ERROR, str(e)))
            raise
