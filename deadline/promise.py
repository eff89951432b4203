import asyncio
import inspect
import logging
from typing import Any, Callable, Generator, Generic, Optional, TypeVar

from .exceptions import Rejection, TimeoutException
from .metrics import MetricsCollector, MetricType, get_metrics_collector
from .poller import TimeoutSession, check_duration

log = logging.getLogger(__name__)

# seconds, tighter than the poller default so timeouts land close to the deadline
PROMISE_INTERVAL = 0.05

T = TypeVar("T")

Resolve = Callable[..., None]
Reject = Callable[..., None]
Executor = Callable[[Resolve, Reject], Any]


class Settlement:
    """Completion flag shared by every path that can settle a promise."""

    def __init__(self) -> None:
        self.completed = False

    def try_complete(self) -> bool:
        """Mark as completed. Returns False if something else got there first."""
        if self.completed:
            return False
        self.completed = True
        return True


def _as_exception(reason: Any) -> BaseException:
    if isinstance(reason, BaseException):
        return reason
    return Rejection(reason)


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class Promise(Generic[T]):
    """
    Deferred value backed by an ``asyncio.Future``.

    ``executor(resolve, reject)`` runs synchronously inside the constructor. It may also be
    a coroutine function, in which case it is scheduled as a task and an exception escaping
    it rejects the promise. Only the first call to ``resolve``/``reject`` has any effect.

    Must be created while an event loop is running.
    """

    def __init__(self, executor: Executor) -> None:
        self._future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._settlement = Settlement()
        self._executor_task: Optional[asyncio.Future] = None

        try:
            result = executor(self._resolve, self._reject)
        except Exception as e:
            self._reject(e)
            return

        if inspect.isawaitable(result):
            self._executor_task = asyncio.ensure_future(result)
            self._executor_task.add_done_callback(self._on_executor_done)

    def __await__(self) -> Generator[Any, None, T]:
        # shield so a cancelled awaiter does not cancel the promise for everyone else
        return asyncio.shield(self._future).__await__()

    def __repr__(self) -> str:
        if not self._future.done():
            status = "pending"
        elif self._future.cancelled():
            status = "cancelled"
        elif self._future.exception() is not None:
            status = "rejected"
        else:
            status = "fulfilled"
        return "<{} {}>".format(self.__class__.__name__, status)

    def done(self) -> bool:
        return self._future.done()

    def then(
        self,
        on_fulfilled: Optional[Callable[[T], Any]] = None,
        on_rejected: Optional[Callable[[BaseException], Any]] = None,
    ) -> "Promise":
        """Attach callbacks for the fulfilment and/or rejection of this promise."""
        return Promise(lambda resolve, reject: self._continue(resolve, reject, on_fulfilled, on_rejected))

    def catch(self, on_rejected: Optional[Callable[[BaseException], Any]] = None) -> "Promise":
        """Attach a callback for only the rejection of this promise."""
        return self.then(None, on_rejected)

    def finally_(self, on_settled: Callable[[], Any]) -> "Promise":
        """Run ``on_settled`` once this promise settles, passing the outcome through."""

        async def after(resolve: Resolve, reject: Reject) -> None:
            try:
                value = await self
            except Exception as e:
                await _maybe_await(on_settled())
                reject(e)
            else:
                await _maybe_await(on_settled())
                resolve(value)

        return Promise(after)

    async def _continue(
        self,
        resolve: Resolve,
        reject: Reject,
        on_fulfilled: Optional[Callable[[T], Any]],
        on_rejected: Optional[Callable[[BaseException], Any]],
    ) -> None:
        try:
            value = await self
        except Exception as e:
            if on_rejected is None:
                reject(e)
            else:
                resolve(await _maybe_await(on_rejected(e)))
        else:
            if on_fulfilled is None:
                resolve(value)
            else:
                resolve(await _maybe_await(on_fulfilled(value)))

    def _resolve(self, value: Any = None) -> None:
        if not self._settlement.try_complete():
            return

        if value is self:
            self._fail(TypeError("Chaining cycle detected for promise {!r}".format(self)))
            return

        if inspect.isawaitable(value):
            # lock in and follow the awaitable
            inner = asyncio.ensure_future(value)
            inner.add_done_callback(self._adopt)
        else:
            self._fulfil(value)

    def _reject(self, reason: Any = None) -> None:
        if not self._settlement.try_complete():
            return
        self._fail(_as_exception(reason))

    def _adopt(self, inner: asyncio.Future) -> None:
        if inner.cancelled():
            self._future.cancel()
        elif inner.exception() is not None:
            self._fail(inner.exception())
        else:
            self._fulfil(inner.result())

    def _on_executor_done(self, task: asyncio.Future) -> None:
        if task.cancelled():
            if self._settlement.try_complete():
                self._future.cancel()
            return

        exc = task.exception()
        if exc is not None:
            self._reject(exc)

    def _fulfil(self, value: Any) -> bool:
        if self._future.done():
            return False
        self._future.set_result(value)
        return True

    def _fail(self, exc: BaseException) -> bool:
        if self._future.done():
            return False
        self._future.set_exception(exc)
        return True


class TimeoutPromise(Promise[T]):
    """
    A Promise that rejects with a ``TimeoutException`` if it has not been resolved or rejected
    within ``duration`` seconds.

    Unlike ``timeout()``, reaching the deadline is a real rejection and must be handled by
    ``catch``, a parent promise or a try/except around ``await``.
    """

    def __init__(
        self,
        executor: Executor,
        duration: Optional[float],
        timeout_message: Optional[str] = None,
        metrics_collector: Optional[MetricsCollector] = None,
    ) -> None:

        self.duration = check_duration(duration)
        self.timeout_message = timeout_message
        self.metrics = metrics_collector if metrics_collector else get_metrics_collector()
        self.session: Optional[TimeoutSession] = None
        self._session_task: Optional[asyncio.Future] = None

        super(TimeoutPromise, self).__init__(executor)

        # executor already settled (or raised), nothing to watch
        if self._settlement.completed:
            return

        self.session = TimeoutSession(
            lambda state: self._settlement.completed,
            self._on_timeout,
            self.duration,
            PROMISE_INTERVAL,
            metrics_collector=self.metrics,
        )
        self._session_task = asyncio.ensure_future(self.session.run())
        self._session_task.add_done_callback(self._on_session_done)

    def _on_timeout(self, state: Any) -> None:
        if self._settlement.completed:
            return

        # a failure building the error must leave the promise unsettled
        error = TimeoutException.create_timeout(self.timeout_message)
        self._settlement.try_complete()

        log.debug(f"Promise timed out after {self.duration}s")
        self.metrics.increment(MetricType.PROMISE_TIMEOUTS)
        self._fail(error)

    def _on_session_done(self, task: asyncio.Future) -> None:
        if task.cancelled():
            return

        exc = task.exception()
        if exc is not None:
            self._reject(exc)

    def _fulfil(self, value: Any) -> bool:
        fulfilled = super()._fulfil(value)
        if fulfilled:
            self.metrics.increment(MetricType.PROMISE_RESOLVED)
        return fulfilled

    def _fail(self, exc: BaseException) -> bool:
        failed = super()._fail(exc)
        if failed:
            log.debug(f"Promise rejected: {exc.__class__.__name__} {exc}")
            self.metrics.increment(MetricType.PROMISE_REJECTED)
        return failed
