"""Execution unit: a label, a one-shot work function and its status cell."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from stepwise.runtime.cell import StatusCell
from stepwise.runtime.errors import AlreadyDispatchedError, NotDispatchedError
from stepwise.runtime.models import ExecutionStatus, UnitSnapshot

logger = logging.getLogger(__name__)

WorkFn = Callable[[StatusCell], None]


class ExecutionUnit:
    """Smallest unit of work, executed on its own worker thread.

    The work function receives the unit's :class:`StatusCell` and must write
    ``COMPLETED`` or ``FAILED`` before returning. A work function that raises
    leaves the unit ``FAILED``; one that returns without a terminal state
    leaves it ``INCOMPLETE``.
    """

    def __init__(self, label: str, work_fn: WorkFn) -> None:
        self._label = label
        self._work_fn: WorkFn | None = work_fn
        self._cell = StatusCell()
        self._thread: threading.Thread | None = None

    def __repr__(self) -> str:
        return f"ExecutionUnit({self._label!r}, {self.current_status().value})"

    @property
    def label(self) -> str:
        return self._label

    @property
    def cell(self) -> StatusCell:
        return self._cell

    @property
    def dispatched(self) -> bool:
        return self._work_fn is None

    def dispatch(self) -> None:
        """Hand the work function to a new worker thread. Allowed exactly once."""

        work_fn, self._work_fn = self._work_fn, None
        if work_fn is None:
            raise AlreadyDispatchedError(self._label)

        self._cell.set(ExecutionStatus.RUNNING)
        self._thread = threading.Thread(
            target=self._work,
            args=(work_fn,),
            daemon=True,
            name=f"stepwise-unit:{self._label}",
        )
        self._thread.start()
        logger.debug("Dispatched unit %r", self._label)

    def current_status(self) -> ExecutionStatus:
        return self._cell.get()

    def snapshot(self) -> UnitSnapshot:
        return UnitSnapshot(label=self._label, status=self._cell.get())

    def join(self, timeout: float | None = None) -> bool:
        """Block until the worker thread has terminated.

        Returns ``False`` only when ``timeout`` elapsed first.
        """

        if self._thread is None:
            raise NotDispatchedError(self._label)
        self._thread.join(timeout=timeout)
        return not self._thread.is_alive()

    def _work(self, work_fn: WorkFn) -> None:
        try:
            work_fn(self._cell)
        except Exception:
            logger.exception("Work function of unit %r raised", self._label)
            self._cell.settle(ExecutionStatus.FAILED)
            return
        except BaseException as exc:
            # A work function calling sys.exit() fails its unit, not the process.
            logger.error("Work function of unit %r exited with %r", self._label, exc)
            self._cell.settle(ExecutionStatus.FAILED)
            if isinstance(exc, KeyboardInterrupt):
                raise
            return

        if self._cell.settle(ExecutionStatus.INCOMPLETE):
            logger.warning(
                "Unit %r returned without setting a terminal status; marked incomplete",
                self._label,
            )
