from .exceptions import DEFAULT_TIMEOUT_MESSAGE, DeadlineException, ExceptionKind, Rejection, TimeoutException
from .metrics import (
    InMemoryMetricsCollector,
    MetricsCollector,
    MetricType,
    NoOpMetricsCollector,
    get_metrics_collector,
    reset_metrics_collector,
    set_metrics_collector,
)
from .poller import DEFAULT_INTERVAL, SessionOutcome, TimeoutSession, timeout
from .promise import PROMISE_INTERVAL, Promise, Settlement, TimeoutPromise

# Optional Prometheus support
try:
    from .prometheus import PrometheusMetricsCollector
except ImportError:
    PrometheusMetricsCollector = None
