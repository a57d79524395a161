"""
Observability - Logging and metrics for generation runs.

Provides:
- Structured logging scoped to a run and its template position
- Run and trigger metrics (labelled counters, gauge, durations)
"""

from genowa.observability.logging import (
    RunScope,
    current_scope,
    set_position,
    configure_logging,
    get_logger,
    LogContext,
    JSONFormatter,
    ReadableFormatter,
)
from genowa.observability.metrics import (
    Counter,
    Gauge,
    DurationStats,
    MetricsRegistry,
    get_metrics,
    reset_metrics,
)

__all__ = [
    # Logging
    "RunScope",
    "current_scope",
    "set_position",
    "configure_logging",
    "get_logger",
    "LogContext",
    "JSONFormatter",
    "ReadableFormatter",
    # Metrics
    "Counter",
    "Gauge",
    "DurationStats",
    "MetricsRegistry",
    "get_metrics",
    "reset_metrics",
]
