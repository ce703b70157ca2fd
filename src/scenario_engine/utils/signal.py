# src/scenario_engine/utils/signal.py
"""Cooperative cancellation signals and their composition."""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

SignalCallback = Callable[[BaseException], Any]


class OperationCancelled(Exception):
    """Default reason of a controller cancelled without an exception."""

    def __init__(self, message: str = "Operation cancelled"):
        super().__init__(message)


class CancellationSignal:
    """
    One-shot broadcast of a cancellation reason.

    The first fire wins; later fires are ignored. Listeners registered with
    ``add_callback`` are invoked synchronously with the reason, and coroutines
    may ``await wait()`` for it.
    """

    def __init__(self) -> None:
        self._fired = False
        self._reason: Optional[BaseException] = None
        self._callbacks: List[SignalCallback] = []
        self._event = asyncio.Event()

    @property
    def fired(self) -> bool:
        return self._fired

    @property
    def reason(self) -> Optional[BaseException]:
        return self._reason

    def add_callback(self, callback: SignalCallback) -> None:
        """Register a listener; it is called immediately if already fired."""
        if self._fired:
            callback(self._reason)
            return
        self._callbacks.append(callback)

    def remove_callback(self, callback: SignalCallback) -> None:
        try:
            self._callbacks.remove(callback)
        except ValueError:
            pass

    def raise_if_fired(self) -> None:
        if self._fired:
            raise self._reason

    async def wait(self) -> BaseException:
        """Wait until the signal fires and return its reason."""
        await self._event.wait()
        return self._reason

    def close(self) -> None:
        """Release timers and upstream listeners. Safe to call repeatedly."""
        self._callbacks.clear()

    def _fire(self, reason: BaseException) -> None:
        if self._fired:
            return
        self._fired = True
        self._reason = reason
        self._event.set()

        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            try:
                callback(reason)
            except Exception as e:
                logger.error(f"Cancellation listener raised: {e}")

    def __enter__(self) -> "CancellationSignal":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = f"fired reason={self._reason!r}" if self._fired else "pending"
        return f"<{type(self).__name__} {state}>"


class CancellationController:
    """Owner side of a ``CancellationSignal``."""

    def __init__(self) -> None:
        self.signal = CancellationSignal()

    def cancel(self, reason: Any = None) -> None:
        """Fire the signal. Strings and ``None`` become ``OperationCancelled``."""
        if reason is None:
            reason = OperationCancelled()
        elif not isinstance(reason, BaseException):
            reason = OperationCancelled(str(reason))
        self.signal._fire(reason)

    @property
    def cancelled(self) -> bool:
        return self.signal.fired


class TimeoutSignal(CancellationSignal):
    """Signal that fires by itself once ``timeout`` seconds have elapsed."""

    def __init__(self,
                 timeout: float,
                 reason_factory: Optional[Callable[[], BaseException]] = None):
        super().__init__()
        self.timeout = timeout
        self._reason_factory = reason_factory or (
            lambda: TimeoutError(f"Timed out after {timeout:g}s")
        )
        loop = asyncio.get_running_loop()
        self._handle: Optional[asyncio.TimerHandle] = loop.call_later(timeout, self._expire)

    def _expire(self) -> None:
        self._handle = None
        self._fire(self._reason_factory())

    def close(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        super().close()


def timeout_signal(timeout: float,
                   reason_factory: Optional[Callable[[], BaseException]] = None) -> TimeoutSignal:
    """Create a signal that fires after ``timeout`` seconds on the running loop."""
    return TimeoutSignal(timeout, reason_factory)


class MergedSignal(CancellationSignal):
    """Signal that fires with the reason of the first of its sources to fire."""

    def __init__(self, sources: List[CancellationSignal]):
        super().__init__()
        self._sources = sources

        # Sources already fired at construction win in argument order
        for source in sources:
            if source.fired:
                self._fire(source.reason)
                return

        for source in sources:
            source.add_callback(self._fire)

    def close(self) -> None:
        for source in self._sources:
            source.remove_callback(self._fire)
        super().close()


def merge_signals(*signals: Optional[CancellationSignal]) -> MergedSignal:
    """
    Combine signals into one that fires when any input fires.

    ``None`` entries are ignored. With no inputs the result never fires.
    """
    return MergedSignal([s for s in signals if s is not None])


def _discard_outcome(task: asyncio.Future) -> None:
    if not task.cancelled():
        task.exception()


async def race(awaitable: Awaitable[T], signal: Optional[CancellationSignal]) -> T:
    """
    Await ``awaitable`` unless ``signal`` fires first.

    When the signal wins, the work task is cancelled, whatever it eventually
    produces is discarded, and the signal's reason is raised.
    """
    if signal is None:
        return await awaitable

    if signal.fired:
        if inspect.iscoroutine(awaitable):
            awaitable.close()
        raise signal.reason

    work = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(signal.wait())
    try:
        await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        work.cancel()
        waiter.cancel()
        raise

    if work.done():
        waiter.cancel()
        return work.result()

    work.cancel()
    work.add_done_callback(_discard_outcome)
    raise signal.reason


async def sleep(delay: float, signal: Optional[CancellationSignal] = None) -> None:
    """Sleep for ``delay`` seconds, raising the signal's reason if it fires."""
    await race(asyncio.sleep(max(0.0, delay)), signal)
