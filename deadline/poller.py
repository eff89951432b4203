import asyncio
import inspect
import logging
import time
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Union

from .metrics import MetricsCollector, MetricType, get_metrics_collector

log = logging.getLogger(__name__)

# seconds
DEFAULT_INTERVAL = 0.1

CancelFunction = Callable[[Any], Union[bool, Awaitable[bool]]]
TimeoutFunction = Callable[[Any], Optional[Awaitable[None]]]


class SessionOutcome(Enum):
    PENDING = "pending"
    CANCELLED = "cancelled"
    TIMED_OUT = "timed_out"
    FAILED = "failed"


async def _invoke(fn: Callable[[Any], Any], state: Any) -> Any:
    result = fn(state)
    if inspect.isawaitable(result):
        result = await result
    return result


def check_duration(duration: Optional[float]) -> float:
    """Falsy durations mean 0. Negative durations raise ValueError."""
    if not duration:
        return 0

    if duration < 0:
        raise ValueError("duration must not be negative, got {}".format(duration))

    return duration


class TimeoutSession:
    """
    A single poll-driven race against a deadline.

    The clock starts when the session is constructed, not when ``run()`` is first awaited.
    Each tick checks the deadline before asking ``cancel_function``, so a session that
    reaches its deadline on the same tick as a cancellation still times out.
    """

    def __init__(
        self,
        cancel_function: Optional[CancelFunction],
        timeout_function: TimeoutFunction,
        duration: Optional[float],
        interval: Optional[float] = None,
        state: Any = None,
        metrics_collector: Optional[MetricsCollector] = None,
    ) -> None:

        duration = check_duration(duration)

        if interval is None:
            interval = DEFAULT_INTERVAL

        if interval <= 0:
            raise ValueError("interval must be positive, got {}".format(interval))

        self.cancel_function = cancel_function
        self.timeout_function = timeout_function
        self.duration: float = duration
        self.interval: float = interval
        self.state = state

        self.start: float = time.monotonic()
        self.elapsed: float = 0.0
        self.ticks: int = 0
        self.outcome: SessionOutcome = SessionOutcome.PENDING
        self._running = False

        self.metrics = metrics_collector if metrics_collector else get_metrics_collector()

    @property
    def settled(self) -> bool:
        return self.outcome is not SessionOutcome.PENDING

    def next_delay(self) -> float:
        # never sleep past the deadline
        return min(self.duration - self.elapsed, self.interval)

    async def run(self) -> None:
        if self._running or self.settled:
            raise RuntimeError("Timeout session can only be run once")

        self._running = True
        self.metrics.increment(MetricType.POLLER_SESSIONS_STARTED)
        log.debug(f"Timeout session started (duration={self.duration}s, interval={self.interval}s)")

        try:
            with self.metrics.timer(MetricType.POLLER_SESSION_DURATION):
                while True:
                    await asyncio.sleep(self.next_delay())
                    if await self._tick():
                        break
        except Exception as e:
            self.outcome = SessionOutcome.FAILED
            self.metrics.increment(MetricType.POLLER_ERRORS, labels={"error_type": e.__class__.__name__})
            log.warning(f"Timeout session failed after {self.ticks} ticks: {e.__class__.__name__} {e}")
            raise
        finally:
            self._running = False

    async def _tick(self) -> bool:
        self.ticks += 1
        self.metrics.increment(MetricType.POLLER_TICKS)

        self.elapsed = max(self.elapsed, time.monotonic() - self.start)

        if self.elapsed >= self.duration:
            await _invoke(self.timeout_function, self.state)
            self.outcome = SessionOutcome.TIMED_OUT
            self.metrics.increment(MetricType.POLLER_TIMEOUTS)
            log.debug(f"Timeout session timed out after {self.elapsed:.3f}s ({self.ticks} ticks)")
            return True

        if self.cancel_function is not None and await _invoke(self.cancel_function, self.state):
            self.outcome = SessionOutcome.CANCELLED
            self.metrics.increment(MetricType.POLLER_CANCELLATIONS)
            log.debug(f"Timeout session cancelled after {self.elapsed:.3f}s ({self.ticks} ticks)")
            return True

        return False


async def timeout(
    cancel_function: Optional[CancelFunction],
    timeout_function: TimeoutFunction,
    duration: Optional[float],
    interval: Optional[float] = None,
    state: Any = None,
) -> None:
    """
    Start a timeout sequence that runs for ``duration`` seconds or until it is cancelled.

    Reaching the deadline is not an error: ``timeout_function`` is called and the
    coroutine returns normally, so callers never need a try/except just for the timeout.
    Use ``TimeoutPromise`` when the timeout should surface as an exception instead.

    The coroutine raises if ``cancel_function`` or ``timeout_function`` raises, with the
    same exception object, and no further ticks are scheduled.

    Args:
        cancel_function: Called every ``interval`` seconds with ``state``. A truthy
            return cancels the sequence. May be ``None`` to never cancel.
        timeout_function: Called with ``state`` once the sequence completes without
            being cancelled.
        duration: Length of the sequence in seconds. Falsy values mean 0.
        interval: Seconds between calls to ``cancel_function``. Defaults to 0.1.
        state: Passed unchanged to both callbacks.

    Either callback may be a coroutine function.
    """
    await TimeoutSession(cancel_function, timeout_function, duration, interval, state).run()
