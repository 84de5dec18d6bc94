"""Background loop that runs the dispatcher on a fixed interval.

State lives in a single ``SchedulerState`` guarded by one lock. ``start``
spawns a daemon thread bound to a child of the caller's cancel scope;
``stop`` cancels that scope and returns without waiting unless ``wait`` is
given. Cycles are serialised by a second lock so a stop/start pair can never
overlap an in-flight cycle with a new one.
"""

from __future__ import annotations

import enum
import logging
import threading
import time
from typing import Callable, Protocol

from automessaging.core.config import MIN_SCHEDULER_INTERVAL_S
from automessaging.dispatch.cancel import CancelScope
from automessaging.dispatch.dispatcher import DispatchReport
from automessaging.dispatch.errors import CycleCancelled

log = logging.getLogger("scheduler")


class SchedulerError(Exception):
    pass


class AlreadyRunningError(SchedulerError):
    def __init__(self):
        super().__init__("scheduler already running")


class NotRunningError(SchedulerError):
    def __init__(self):
        super().__init__("scheduler not running")


class SchedulerState(str, enum.Enum):
    IDLE = "idle"
    RUNNING = "running"


class Processor(Protocol):
    def process_pending_messages(self, cancel: CancelScope | None = None) -> DispatchReport: ...


class Scheduler:
    def __init__(
        self,
        processor: Processor,
        interval: float,
        *,
        min_interval: float = MIN_SCHEDULER_INTERVAL_S,
        clock: Callable[[], float] = time.monotonic,
    ):
        if interval <= 0:
            interval = min_interval
        self._processor = processor
        self._interval = max(interval, min_interval)
        self._clock = clock

        self._lock = threading.Lock()
        self._state = SchedulerState.IDLE
        self._scope: CancelScope | None = None
        self._thread: threading.Thread | None = None

        self._cycle_lock = threading.Lock()

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def state(self) -> SchedulerState:
        with self._lock:
            return self._state

    def is_running(self) -> bool:
        return self.state is SchedulerState.RUNNING

    def start(self, parent: CancelScope | None = None) -> None:
        with self._lock:
            if self._state is SchedulerState.RUNNING:
                raise AlreadyRunningError()

            scope = CancelScope(parent)
            thread = threading.Thread(target=self._run, args=(scope,), name="message-scheduler", daemon=True)
            self._scope = scope
            self._thread = thread
            self._state = SchedulerState.RUNNING
            thread.start()
        log.info("Scheduler started (interval=%ss)", self._interval)

    def stop(self, *, wait: float | None = None) -> None:
        """Cancel the loop. With ``wait``, join the loop thread for up to that many seconds."""

        with self._lock:
            if self._state is SchedulerState.IDLE:
                raise NotRunningError()
            self._scope.cancel()
            self._scope = None
            self._state = SchedulerState.IDLE
            thread = self._thread
        log.info("Scheduler stopped")

        if wait is not None and thread is not None and thread is not threading.current_thread():
            thread.join(wait)
            if thread.is_alive():
                log.warning("Scheduler loop still finishing its cycle after %ss", wait)

    def _run(self, scope: CancelScope) -> None:
        try:
            next_tick = self._clock() + self._interval
            self._execute(scope)
            while True:
                if scope.wait(max(next_tick - self._clock(), 0.0)):
                    return
                # Ticks missed while a cycle overran collapse into the one we
                # are about to serve.
                now = self._clock()
                while next_tick <= now:
                    next_tick += self._interval
                self._execute(scope)
        finally:
            self._release(scope)

    def _execute(self, scope: CancelScope) -> None:
        with self._cycle_lock:
            if scope.cancelled:
                return
            try:
                report = self._processor.process_pending_messages(scope)
            except CycleCancelled:
                return
            except Exception as e:
                log.error("Scheduler iteration failed: %s", e)
                return
        if report and report.fetched:
            log.info("Cycle done: fetched=%s sent=%s failed=%s", report.fetched, report.sent, report.failed)

    def _release(self, scope: CancelScope) -> None:
        # The loop can also end through the parent scope; drop back to idle so
        # a later start succeeds.
        with self._lock:
            if self._scope is scope:
                self._scope = None
                self._state = SchedulerState.IDLE
                log.info("Scheduler loop ended by parent cancellation")
