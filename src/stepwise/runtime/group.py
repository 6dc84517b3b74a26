"""Task group: units dispatched together, awaited as one stage."""

from __future__ import annotations

import logging
import threading
import time

from stepwise.runtime.errors import GroupFrozenError
from stepwise.runtime.models import (
    ExecutionStatus,
    GroupFailure,
    GroupResult,
    GroupSuccess,
    UnitSnapshot,
)
from stepwise.runtime.unit import ExecutionUnit, WorkFn

logger = logging.getLogger(__name__)

# Upper bound for one wait on the change event; listeners normally wake us first.
_WAIT_SLICE_SECONDS = 0.5


class TaskGroup:
    """Ordered, append-only set of units that run concurrently with each other."""

    def __init__(self, title: str = "") -> None:
        self.title = title
        self._units: list[ExecutionUnit] = []
        self._started = False
        self._changed = threading.Event()

    def __len__(self) -> int:
        return len(self._units)

    @property
    def units(self) -> tuple[ExecutionUnit, ...]:
        return tuple(self._units)

    @property
    def started(self) -> bool:
        return self._started

    def add_unit(self, unit: ExecutionUnit) -> ExecutionUnit:
        if self._started:
            raise GroupFrozenError(
                f"Cannot add unit {unit.label!r}: group {self.title!r} already started.",
            )
        self._units.append(unit)
        return unit

    def add(self, label: str, work_fn: WorkFn) -> ExecutionUnit:
        return self.add_unit(ExecutionUnit(label, work_fn))

    def snapshots(self) -> list[UnitSnapshot]:
        return [unit.snapshot() for unit in self._units]

    def run(self, timeout_seconds: float | None = None) -> GroupResult:
        """Dispatch every unit and block until the group outcome is known.

        Returns as soon as any unit is in a failure state, citing the
        lowest-index failed unit; running siblings are not awaited. On success
        every worker is joined before returning.
        """

        if self._started:
            raise GroupFrozenError(f"Group {self.title!r} already started.")
        self._started = True

        for unit in self._units:
            unit.cell.add_listener(self._on_status_change)
        for unit in self._units:
            unit.dispatch()
        logger.debug("Group %r dispatched %d units", self.title, len(self._units))

        deadline = None if not timeout_seconds else time.monotonic() + timeout_seconds
        while True:
            self._changed.clear()
            statuses = [unit.current_status() for unit in self._units]

            failure = _first_failure(self._units, statuses)
            if failure is not None:
                logger.debug("Group %r failed at unit %r", self.title, failure.label)
                return failure

            if all(status == ExecutionStatus.COMPLETED for status in statuses):
                for unit in self._units:
                    unit.join()
                logger.debug("Group %r completed", self.title)
                return GroupSuccess(unit_count=len(self._units))

            wait = _WAIT_SLICE_SECONDS
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return _timeout_failure(self._units, statuses)
                wait = min(wait, remaining)
            self._changed.wait(wait)

    def _on_status_change(self, _status: ExecutionStatus) -> None:
        self._changed.set()


def _first_failure(
    units: list[ExecutionUnit],
    statuses: list[ExecutionStatus],
) -> GroupFailure | None:
    for index, (unit, status) in enumerate(zip(units, statuses, strict=True)):
        if status.is_failure:
            return GroupFailure(
                label=unit.label,
                index=index,
                status=status,
                reason=status.value,
            )
    return None


def _timeout_failure(
    units: list[ExecutionUnit],
    statuses: list[ExecutionStatus],
) -> GroupFailure:
    for index, (unit, status) in enumerate(zip(units, statuses, strict=True)):
        if not status.is_terminal:
            logger.warning("Unit %r did not finish before the group timeout", unit.label)
            return GroupFailure(label=unit.label, index=index, status=status, reason="timeout")
    # Unreachable: a snapshot with every unit terminal is a success or a failure.
    raise AssertionError("timeout reported with every unit terminal")
