import logging
import os

import pytest
from dotenv import load_dotenv

from deadline import InMemoryMetricsCollector, reset_metrics_collector, set_metrics_collector

# Load environment variables
load_dotenv()

# Slack allowed on top of expected durations, raise on slow CI machines
TIMING_TOLERANCE = float(os.environ.get("TIMING_TOLERANCE", "0.5"))

# Configure logging
logging.basicConfig(level=logging.DEBUG)


@pytest.fixture
def tolerance():
    return TIMING_TOLERANCE


@pytest.fixture
def metrics():
    """Install an in-memory collector globally for the duration of a test."""
    collector = InMemoryMetricsCollector()
    set_metrics_collector(collector)
    yield collector
    reset_metrics_collector()
