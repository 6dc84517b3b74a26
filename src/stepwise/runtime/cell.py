"""Lock-guarded status cell shared between a unit's worker and its observers."""

from __future__ import annotations

import threading
from collections.abc import Callable

from stepwise.runtime.errors import InvalidTransitionError
from stepwise.runtime.models import ExecutionStatus

StatusListener = Callable[[ExecutionStatus], None]

_ALLOWED = {
    ExecutionStatus.PENDING: frozenset({ExecutionStatus.RUNNING}),
    ExecutionStatus.RUNNING: frozenset(
        {ExecutionStatus.COMPLETED, ExecutionStatus.FAILED, ExecutionStatus.INCOMPLETE},
    ),
}


class StatusCell:
    """Holds one unit's lifecycle state.

    Reads and writes are mutually exclusive; the value is always read whole.
    Transitions only move forward: ``PENDING -> RUNNING -> terminal``.
    Writing the current value again is a no-op.
    """

    __slots__ = ("_listeners", "_lock", "_status")

    def __init__(self, status: ExecutionStatus = ExecutionStatus.PENDING) -> None:
        self._lock = threading.Lock()
        self._status = status
        self._listeners: list[StatusListener] = []

    def __repr__(self) -> str:
        return f"StatusCell({self.get().value})"

    def get(self) -> ExecutionStatus:
        with self._lock:
            return self._status

    def set(self, status: ExecutionStatus) -> None:
        with self._lock:
            current = self._status
            if status == current:
                return
            if status not in _ALLOWED.get(current, ()):
                raise InvalidTransitionError(current.value, status.value)
            self._status = status
            listeners = tuple(self._listeners)
        self._notify(listeners, status)

    def settle(self, status: ExecutionStatus) -> bool:
        """Write a terminal ``status`` unless the cell is already terminal.

        Check and write happen under one lock acquisition. Returns whether the
        write took effect.
        """

        with self._lock:
            current = self._status
            if current.is_terminal:
                return False
            if status not in _ALLOWED.get(current, ()):
                raise InvalidTransitionError(current.value, status.value)
            self._status = status
            listeners = tuple(self._listeners)
        self._notify(listeners, status)
        return True

    def complete(self) -> None:
        self.set(ExecutionStatus.COMPLETED)

    def fail(self) -> None:
        self.set(ExecutionStatus.FAILED)

    def add_listener(self, listener: StatusListener) -> None:
        """Register a callback run after every effective write, outside the lock."""

        with self._lock:
            self._listeners.append(listener)

    @staticmethod
    def _notify(listeners: tuple[StatusListener, ...], status: ExecutionStatus) -> None:
        for listener in listeners:
            listener(status)
