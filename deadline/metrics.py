"""
Metrics collection for async-deadline.

This module provides optional metrics collection for poll sessions and
timeout promises. Metrics are disabled by default and have zero overhead when not enabled.
"""

import time
from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, Optional, Union


class MetricType(Enum):
    """Types of metrics collected."""

    # Poller metrics
    POLLER_SESSIONS_STARTED = "poller_sessions_started_total"
    POLLER_TICKS = "poller_ticks_total"
    POLLER_TIMEOUTS = "poller_timeouts_total"
    POLLER_CANCELLATIONS = "poller_cancellations_total"
    POLLER_ERRORS = "poller_errors_total"
    POLLER_SESSION_DURATION = "poller_session_duration_seconds"

    # Promise metrics
    PROMISE_RESOLVED = "promise_resolved_total"
    PROMISE_REJECTED = "promise_rejected_total"
    PROMISE_TIMEOUTS = "promise_timeouts_total"


class MetricsCollector(ABC):
    """Abstract base class for metrics collectors."""

    @abstractmethod
    def increment(self, metric: MetricType, value: float = 1, labels: Optional[Dict[str, str]] = None) -> None:
        """Increment a counter metric."""
        pass

    @abstractmethod
    def histogram(self, metric: MetricType, value: float, labels: Optional[Dict[str, str]] = None) -> None:
        """Record a histogram metric."""
        pass

    @abstractmethod
    def timer(self, metric: MetricType, labels: Optional[Dict[str, str]] = None):
        """Context manager for timing operations."""
        pass


class Timer:
    """Context manager for timing operations."""

    def __init__(self, callback, metric: MetricType, labels: Optional[Dict[str, str]] = None):
        self.callback = callback
        self.metric = metric
        self.labels = labels
        self.start_time = None

    def __enter__(self):
        self.start_time = time.monotonic()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = time.monotonic() - self.start_time
        self.callback(self.metric, duration, self.labels)


class NoOpMetricsCollector(MetricsCollector):
    """No-op metrics collector that does nothing. Used when metrics are disabled."""

    def increment(self, metric: MetricType, value: float = 1, labels: Optional[Dict[str, str]] = None) -> None:
        pass

    def histogram(self, metric: MetricType, value: float, labels: Optional[Dict[str, str]] = None) -> None:
        pass

    def timer(self, metric: MetricType, labels: Optional[Dict[str, str]] = None):
        return Timer(lambda *args: None, metric, labels)


class InMemoryMetricsCollector(MetricsCollector):
    """Simple in-memory metrics collector for testing and debugging."""

    def __init__(self):
        self.counters: Dict[str, float] = {}
        self.histograms: Dict[str, list] = {}

    def _make_key(self, metric: MetricType, labels: Optional[Dict[str, str]] = None) -> str:
        """Create a unique key for a metric with labels."""
        key = metric.value
        if labels:
            label_str = ",".join(f"{k}={v}" for k, v in sorted(labels.items()))
            key = f"{key}{{{label_str}}}"
        return key

    def increment(self, metric: MetricType, value: float = 1, labels: Optional[Dict[str, str]] = None) -> None:
        key = self._make_key(metric, labels)
        self.counters[key] = self.counters.get(key, 0) + value

    def histogram(self, metric: MetricType, value: float, labels: Optional[Dict[str, str]] = None) -> None:
        key = self._make_key(metric, labels)
        self.histograms.setdefault(key, []).append(value)

    def timer(self, metric: MetricType, labels: Optional[Dict[str, str]] = None):
        return Timer(self.histogram, metric, labels)

    def get_metrics(self) -> Dict[str, Union[float, list]]:
        """Get all collected metrics."""
        metrics = {}
        metrics.update(self.counters)
        metrics.update(self.histograms)
        return metrics


# Global default collector - NoOp by default
_default_collector = NoOpMetricsCollector()


def set_metrics_collector(collector: MetricsCollector) -> None:
    """Set the global metrics collector."""
    global _default_collector
    _default_collector = collector


def get_metrics_collector() -> MetricsCollector:
    """Get the current metrics collector."""
    return _default_collector


def reset_metrics_collector() -> None:
    """Reset to the default no-op collector."""
    global _default_collector
    _default_collector = NoOpMetricsCollector()
