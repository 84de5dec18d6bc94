from __future__ import annotations

import threading

from automessaging.dispatch.errors import CycleCancelled


class CancelScope:
    """Cooperative cancellation signal.

    A scope created with a parent is cancelled whenever the parent is.
    Cancelling a child never affects the parent.
    """

    def __init__(self, parent: CancelScope | None = None):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._children: list[CancelScope] = []
        self._parent = parent
        if parent is not None:
            parent._attach(self)

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            children, self._children = self._children, []
        for child in children:
            child.cancel()
        if self._parent is not None:
            self._parent._detach(self)

    def wait(self, timeout: float | None = None) -> bool:
        """Block up to ``timeout`` seconds; True once cancelled."""

        return self._event.wait(timeout)

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise CycleCancelled()

    def _attach(self, child: CancelScope) -> None:
        with self._lock:
            if not self._event.is_set():
                self._children.append(child)
                return
        child.cancel()

    def _detach(self, child: CancelScope) -> None:
        with self._lock:
            if child in self._children:
                self._children.remove(child)
