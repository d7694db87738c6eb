"""Prometheus metrics for the segment store."""

from __future__ import annotations

from prometheus_client import (
    Counter,
    Histogram,
    Info,
    start_http_server,
    REGISTRY,
    CollectorRegistry,
)


class MetricsRegistry:
    """Registry of all segment store metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics registry."""
        self._registry = registry or REGISTRY

        # Command metrics
        self.commands_total = Counter(
            "segment_db_commands_total",
            "Total number of commands executed",
            ["command", "status"],  # command: insert, select, delete
            registry=self._registry,
        )

        self.command_latency_seconds = Histogram(
            "segment_db_command_latency_seconds",
            "Command latency in seconds",
            ["command"],
            buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
            registry=self._registry,
        )

        # Row metrics
        self.rows_inserted_total = Counter(
            "segment_db_rows_inserted_total",
            "Total rows appended to segments",
            ["table"],
            registry=self._registry,
        )

        self.rows_deleted_total = Counter(
            "segment_db_rows_deleted_total",
            "Total rows removed by segment rewrites",
            ["table"],
            registry=self._registry,
        )

        # Segment metrics
        self.segments_created_total = Counter(
            "segment_db_segments_created_total",
            "Total segment files created",
            ["table"],
            registry=self._registry,
        )

        self.segments_rewritten_total = Counter(
            "segment_db_segments_rewritten_total",
            "Total whole-segment rewrites",
            ["table"],
            registry=self._registry,
        )

        self.segments_skipped_total = Counter(
            "segment_db_segments_skipped_total",
            "Segments skipped during a scan because of an error",
            ["table"],
            registry=self._registry,
        )

        self.info = Info(
            "segment_db",
            "Segment store information",
            registry=self._registry,
        )


_metrics: MetricsRegistry | None = None


def setup_metrics(port: int = 8001, registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """
    Set up Prometheus metrics server.

    Args:
        port: Port for the metrics HTTP server
        registry: Optional custom registry

    Returns:
        The metrics registry
    """
    global _metrics
    _metrics = MetricsRegistry(registry)

    from segment_db import __version__
    _metrics.info.info({
        "version": __version__,
    })

    start_http_server(port, registry=registry or REGISTRY)

    return _metrics


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics
