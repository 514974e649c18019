"""Deferred, cancelable work: the debounced flush and the repeating task.

Both classes take a *start_timer* callback, ``start_timer(delay, callback)``,
which schedules *callback* once after *delay* seconds and returns a handle
with a ``.cancel()`` method.  The default starts a daemon
:class:`threading.Timer`; tests inject a manual clock instead.
"""

from __future__ import annotations

import threading
from typing import Any, Callable

from .errors import IOFailure
from .log import logger

# Type alias for the handle returned by ``start_timer``.
TimerHandle = Any
TimerFactory = Callable[[float, Callable[[], None]], TimerHandle]

DEFAULT_DEBOUNCE = 0.5


def thread_timer(delay: float, callback: Callable[[], None]) -> threading.Timer:
    """Run *callback* once on a daemon thread after *delay* seconds."""
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


class FlushScheduler:
    """Coalesce bursts of mutations into a single flush.

    Parameters
    ----------
    flush_fn:
        Serializes the store and writes the backing file.  Expected to raise
        :class:`~flexidb.errors.IOFailure` on failure.
    delay:
        Quiescence period in seconds before a pending flush runs.
    start_timer:
        Timer factory, see the module docstring.
    lock:
        Optional lock held while the timer-driven flush runs, so it never
        observes a half-applied mutation.
    """

    def __init__(
        self,
        flush_fn: Callable[[], None],
        *,
        delay: float = DEFAULT_DEBOUNCE,
        start_timer: TimerFactory | None = None,
        lock: threading.RLock | None = None,
    ) -> None:
        self._flush_fn = flush_fn
        self.delay = delay
        self._start_timer = start_timer or thread_timer
        self._lock = lock or threading.RLock()
        self._timer: TimerHandle | None = None
        self._generation = 0
        self._dirty = False

    @property
    def dirty(self) -> bool:
        return self._dirty

    @property
    def pending(self) -> bool:
        """True while a debounce timer is armed."""
        return self._timer is not None

    def mark_dirty(self) -> None:
        """Record unflushed changes and restart the debounce timer."""
        with self._lock:
            self._dirty = True
            self._cancel_timer()
            generation = self._generation
            self._timer = self._start_timer(
                self.delay, lambda: self._on_timer(generation)
            )

    def flush_now(self) -> bool:
        """Flush immediately if dirty.  Return True if a write happened.

        On failure the dirty flag stays set and the error propagates.
        """
        with self._lock:
            self._cancel_timer()
            if not self._dirty:
                return False
            self._flush_fn()
            self._dirty = False
            return True

    def cancel(self) -> None:
        """Drop the pending timer without flushing."""
        with self._lock:
            self._cancel_timer()

    # -- internal helpers -----------------------------------------------------

    def _cancel_timer(self) -> None:
        # A thread timer may already be running its callback when cancelled;
        # bumping the generation makes that stale callback a no-op.
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timer(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self._timer = None
            try:
                self.flush_now()
            except IOFailure:
                # Nobody to raise to; the next mutation or explicit flush retries.
                logger.exception("debounced flush failed, changes remain pending")


class IntervalTask:
    """Run *fn* every *interval* seconds until stopped.

    Errors raised by *fn* are logged and do not stop the task.
    """

    def __init__(
        self,
        interval: float,
        fn: Callable[[], object],
        *,
        start_timer: TimerFactory | None = None,
    ) -> None:
        self.interval = interval
        self._fn = fn
        self._start_timer = start_timer or thread_timer
        self._timer: TimerHandle | None = None
        self._running = False
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        with self._lock:
            if self._running:
                return
            self._running = True
            self._timer = self._start_timer(self.interval, self._tick)

    def stop(self) -> None:
        with self._lock:
            self._running = False
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def _tick(self) -> None:
        with self._lock:
            if not self._running:
                return
            self._timer = None
        try:
            self._fn()
        except Exception:
            logger.exception("interval task %r failed", self._fn)
        with self._lock:
            if self._running:
                self._timer = self._start_timer(self.interval, self._tick)
