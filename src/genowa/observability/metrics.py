"""
Metrics - Run and trigger statistics for the generation driver.

Every metric is lock-protected because concurrent runs update the same
registry. Counters can be split by label, so trigger dispatches are
counted per keyword and failures per error type.
"""

from dataclasses import dataclass, field
from threading import Lock
from typing import Any


class Counter:
    """
    Monotonically increasing count, optionally split by label.

    `value` is the total over all labels.
    """

    def __init__(self, name: str, description: str = ""):
        self.name = name
        self.description = description
        self._by_label: dict[str, int] = {}
        self._lock = Lock()

    def inc(self, amount: int = 1, label: str = "") -> None:
        with self._lock:
            self._by_label[label] = self._by_label.get(label, 0) + amount

    @property
    def value(self) -> int:
        with self._lock:
            return sum(self._by_label.values())

    def by_label(self) -> dict[str, int]:
        """Counts per non-empty label, sorted by label."""
        with self._lock:
            return {k: v for k, v in sorted(self._by_label.items()) if k}

    def reset(self) -> None:
        with self._lock:
            self._by_label.clear()


class Gauge:
    """Number of things currently in progress."""

    def __init__(self, name: str, description: str = ""):
        self.name = name
        self.description = description
        self._value = 0
        self._lock = Lock()

    def inc(self) -> None:
        with self._lock:
            self._value += 1

    def dec(self) -> None:
        with self._lock:
            self._value -= 1

    @property
    def value(self) -> int:
        return self._value

    def reset(self) -> None:
        with self._lock:
            self._value = 0


class DurationStats:
    """Count, total, slowest and fastest of observed durations in seconds."""

    def __init__(self, name: str, description: str = ""):
        self.name = name
        self.description = description
        self._samples: list[float] = []
        self._lock = Lock()

    def observe(self, seconds: float) -> None:
        with self._lock:
            self._samples.append(seconds)

    @property
    def count(self) -> int:
        return len(self._samples)

    @property
    def total(self) -> float:
        with self._lock:
            return sum(self._samples)

    def to_dict(self) -> dict[str, float]:
        with self._lock:
            samples = list(self._samples)
        if not samples:
            return {"count": 0, "total": 0.0, "avg": 0.0, "min": 0.0, "max": 0.0}
        return {
            "count": len(samples),
            "total": sum(samples),
            "avg": sum(samples) / len(samples),
            "min": min(samples),
            "max": max(samples),
        }

    def reset(self) -> None:
        with self._lock:
            self._samples.clear()


@dataclass
class MetricsRegistry:
    """
    Registry for all generation metrics.
    """
    runs_total: Counter = field(
        default_factory=lambda: Counter("runs_total", "Generation runs started, by target")
    )
    runs_succeeded: Counter = field(
        default_factory=lambda: Counter("runs_succeeded", "Runs that wrote output, by target")
    )
    runs_failed: Counter = field(
        default_factory=lambda: Counter("runs_failed", "Runs that failed, by error type")
    )
    lines_emitted: Counter = field(
        default_factory=lambda: Counter("lines_emitted", "Output lines produced, by target")
    )
    triggers_fired: Counter = field(
        default_factory=lambda: Counter("triggers_fired", "Trigger invocations, by keyword")
    )
    run_duration_seconds: DurationStats = field(
        default_factory=lambda: DurationStats("run_duration_seconds", "Run duration")
    )
    active_runs: Gauge = field(
        default_factory=lambda: Gauge("active_runs", "Runs currently in progress")
    )

    def to_dict(self) -> dict[str, Any]:
        """Export all metrics as dict."""
        return {
            "runs": {
                "total": self.runs_total.value,
                "succeeded": self.runs_succeeded.value,
                "failed": self.runs_failed.value,
                "active": self.active_runs.value,
                "by_target": self.runs_total.by_label(),
                "failures_by_error": self.runs_failed.by_label(),
            },
            "output": {
                "lines_emitted": self.lines_emitted.value,
                "triggers_fired": self.triggers_fired.value,
                "triggers_by_keyword": self.triggers_fired.by_label(),
            },
            "duration": {
                "run": self.run_duration_seconds.to_dict(),
            },
        }

    def reset(self) -> None:
        """Reset all metrics (for testing)."""
        self.runs_total.reset()
        self.runs_succeeded.reset()
        self.runs_failed.reset()
        self.lines_emitted.reset()
        self.triggers_fired.reset()
        self.run_duration_seconds.reset()
        self.active_runs.reset()


# Global metrics registry
_metrics = MetricsRegistry()


def get_metrics() -> MetricsRegistry:
    """Get global metrics registry."""
    return _metrics


def reset_metrics() -> None:
    """Reset all metrics (for testing)."""
    _metrics.reset()
