"""Unit tests for metrics functionality."""

import time
from unittest.mock import MagicMock

import pytest

from deadline import (
    InMemoryMetricsCollector,
    MetricType,
    NoOpMetricsCollector,
    get_metrics_collector,
    reset_metrics_collector,
    set_metrics_collector,
)
from deadline.metrics import Timer


class TestNoOpMetricsCollector:
    def test_all_operations_are_noop(self):
        collector = NoOpMetricsCollector()

        collector.increment(MetricType.POLLER_TICKS, 10)
        collector.histogram(MetricType.POLLER_SESSION_DURATION, 0.5)

        with collector.timer(MetricType.POLLER_SESSION_DURATION):
            pass


class TestInMemoryMetricsCollector:
    def test_counter_increments(self):
        collector = InMemoryMetricsCollector()

        collector.increment(MetricType.POLLER_ERRORS, 1, {"error_type": "KeyError"})
        collector.increment(MetricType.POLLER_ERRORS, 2, {"error_type": "KeyError"})
        collector.increment(MetricType.POLLER_ERRORS, 1, {"error_type": "ValueError"})

        assert collector.counters["poller_errors_total{error_type=KeyError}"] == 3
        assert collector.counters["poller_errors_total{error_type=ValueError}"] == 1

    def test_histogram_records_values(self):
        collector = InMemoryMetricsCollector()

        for value in (0.1, 0.3, 0.2):
            collector.histogram(MetricType.POLLER_SESSION_DURATION, value)

        assert collector.histograms["poller_session_duration_seconds"] == [0.1, 0.3, 0.2]

    def test_timer_records_duration(self):
        collector = InMemoryMetricsCollector()

        with collector.timer(MetricType.POLLER_SESSION_DURATION):
            time.sleep(0.01)

        values = collector.histograms["poller_session_duration_seconds"]
        assert len(values) == 1
        assert values[0] >= 0.01

    def test_labels_ordering(self):
        collector = InMemoryMetricsCollector()

        collector.increment(MetricType.POLLER_ERRORS, 1, {"error_type": "KeyError", "source": "cancel"})
        collector.increment(MetricType.POLLER_ERRORS, 1, {"source": "cancel", "error_type": "KeyError"})

        assert collector.counters == {"poller_errors_total{error_type=KeyError,source=cancel}": 2}

    def test_get_metrics(self):
        collector = InMemoryMetricsCollector()

        collector.increment(MetricType.PROMISE_TIMEOUTS)
        collector.histogram(MetricType.POLLER_SESSION_DURATION, 0.5)

        assert collector.get_metrics() == {
            "promise_timeouts_total": 1,
            "poller_session_duration_seconds": [0.5],
        }


class TestTimer:
    def test_timer_calls_callback(self):
        callback = MagicMock()
        labels = {"error_type": "x"}

        with Timer(callback, MetricType.POLLER_SESSION_DURATION, labels):
            time.sleep(0.01)

        callback.assert_called_once()
        metric, duration, passed_labels = callback.call_args[0]
        assert metric is MetricType.POLLER_SESSION_DURATION
        assert duration >= 0.01
        assert passed_labels == labels


class TestGlobalCollectorManagement:
    def test_default_collector_is_noop(self):
        reset_metrics_collector()
        assert isinstance(get_metrics_collector(), NoOpMetricsCollector)

    def test_set_and_reset(self):
        custom = InMemoryMetricsCollector()
        set_metrics_collector(custom)
        assert get_metrics_collector() is custom

        reset_metrics_collector()
        assert isinstance(get_metrics_collector(), NoOpMetricsCollector)


class TestPrometheusOptional:
    def test_prometheus_collector(self):
        prometheus_client = pytest.importorskip("prometheus_client")
        CollectorRegistry = prometheus_client.CollectorRegistry

        from deadline import PrometheusMetricsCollector

        registry = CollectorRegistry()
        collector = PrometheusMetricsCollector(registry=registry)

        collector.increment(MetricType.POLLER_TIMEOUTS)
        collector.increment(MetricType.POLLER_ERRORS, labels={"error_type": "KeyError"})
        collector.histogram(MetricType.POLLER_SESSION_DURATION, 0.2)

        assert registry.get_sample_value("async_deadline_poller_timeouts_total") == 1
        assert registry.get_sample_value("async_deadline_poller_errors_total", {"error_type": "KeyError"}) == 1
        assert registry.get_sample_value("async_deadline_poller_session_duration_seconds_count") == 1


class TestMetricTypeEnum:
    def test_metric_naming_convention(self):
        for metric in MetricType:
            assert metric.value.islower()
            assert " " not in metric.value
            assert metric.value.startswith(("poller_", "promise_"))
