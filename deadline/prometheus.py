"""
Prometheus metrics collector for async-deadline.

This module is optional and only imported if prometheus_client is installed.
"""

from typing import Dict, Optional

try:
    from prometheus_client import CollectorRegistry, Counter, Histogram

    PROMETHEUS_AVAILABLE = True
except ImportError:
    PROMETHEUS_AVAILABLE = False
    Counter = Histogram = CollectorRegistry = None

from .metrics import MetricsCollector, MetricType, Timer

# (metric, documentation, labelnames)
_COUNTERS = [
    (MetricType.POLLER_SESSIONS_STARTED, "Total number of timeout sessions started", []),
    (MetricType.POLLER_TICKS, "Total number of poll ticks across all sessions", []),
    (MetricType.POLLER_TIMEOUTS, "Total number of sessions that reached their deadline", []),
    (MetricType.POLLER_CANCELLATIONS, "Total number of sessions cancelled before their deadline", []),
    (MetricType.POLLER_ERRORS, "Total number of sessions ended by a callback error", ["error_type"]),
    (MetricType.PROMISE_RESOLVED, "Total number of timeout promises fulfilled", []),
    (MetricType.PROMISE_REJECTED, "Total number of timeout promises rejected, timeouts included", []),
    (MetricType.PROMISE_TIMEOUTS, "Total number of timeout promises rejected by their deadline", []),
]


class PrometheusMetricsCollector(MetricsCollector):
    """Prometheus metrics collector implementation."""

    def __init__(self, namespace: str = "async_deadline", registry: Optional["CollectorRegistry"] = None):
        """
        Initialize Prometheus metrics collector.

        Args:
            namespace: Prometheus metric namespace
            registry: Optional prometheus CollectorRegistry. If not provided,
                     uses the default global registry.
        """
        if not PROMETHEUS_AVAILABLE:
            raise ImportError(
                "prometheus_client is not installed. " "Install with: pip install async-deadline[prometheus]"
            )

        self.namespace = namespace
        self.registry = registry
        self._metrics = {}

        self._init_metrics()

    def _init_metrics(self):
        for metric, documentation, labelnames in _COUNTERS:
            self._metrics[metric] = Counter(
                name=metric.value,
                documentation=documentation,
                namespace=self.namespace,
                labelnames=labelnames,
                registry=self.registry,
            )

        self._metrics[MetricType.POLLER_SESSION_DURATION] = Histogram(
            name=MetricType.POLLER_SESSION_DURATION.value,
            documentation="Wall time from session start until it settled",
            namespace=self.namespace,
            buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
            registry=self.registry,
        )

    def increment(self, metric: MetricType, value: float = 1, labels: Optional[Dict[str, str]] = None) -> None:
        """Increment a counter metric."""
        if metric not in self._metrics:
            return

        prometheus_metric = self._metrics[metric]
        if labels:
            prometheus_metric.labels(**labels).inc(value)
        else:
            prometheus_metric.inc(value)

    def histogram(self, metric: MetricType, value: float, labels: Optional[Dict[str, str]] = None) -> None:
        """Record a histogram metric."""
        if metric not in self._metrics:
            return

        prometheus_metric = self._metrics[metric]
        if labels:
            prometheus_metric.labels(**labels).observe(value)
        else:
            prometheus_metric.observe(value)

    def timer(self, metric: MetricType, labels: Optional[Dict[str, str]] = None):
        """Context manager for timing operations."""
        return Timer(self.histogram, metric, labels)
