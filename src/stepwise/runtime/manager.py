"""Progress manager: runs groups one at a time behind a live terminal view."""

from __future__ import annotations

import logging
import sys
import threading

from stepwise.config import Settings
from stepwise.runtime.errors import ManagerStartedError
from stepwise.runtime.group import TaskGroup
from stepwise.runtime.models import (
    GroupFailure,
    GroupResult,
    ManagerState,
    RunOutcome,
    StageFailure,
)
from stepwise.runtime.view import TerminalView

logger = logging.getLogger(__name__)


class ProgressManager:
    """Top-level driver sequencing task groups.

    Group ``i + 1`` is dispatched only after group ``i`` reported success.
    The first failing group halts the run: :meth:`run` returns a failed
    :class:`RunOutcome` and :meth:`start` turns it into a process exit.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        view: TerminalView | None = None,
    ) -> None:
        self._settings = settings or Settings.from_env()
        self._settings.validate()
        self._view = view or TerminalView(color=self._settings.color)
        self._groups: list[TaskGroup] = []
        self._tick = 0
        self._state = ManagerState.IDLE
        self._current_group: int | None = None

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def groups(self) -> tuple[TaskGroup, ...]:
        return tuple(self._groups)

    @property
    def state(self) -> ManagerState:
        return self._state

    @property
    def current_group(self) -> int | None:
        """0-based index of the running group, if any."""

        return self._current_group

    @property
    def tick(self) -> int:
        return self._tick

    def add_group(self, group: TaskGroup) -> TaskGroup:
        if self._state != ManagerState.IDLE:
            raise ManagerStartedError("Cannot add a group after the manager started.")
        self._groups.append(group)
        return group

    def group(self, title: str = "") -> TaskGroup:
        return self.add_group(TaskGroup(title))

    def run(self) -> RunOutcome:
        """Run every group in order and report how far the run got."""

        if self._state != ManagerState.IDLE:
            raise ManagerStartedError("Progress manager can only run once.")

        total = len(self._groups)
        outcome = RunOutcome(total_groups=total)
        for index, group in enumerate(self._groups):
            stage = index + 1
            self._state = ManagerState.RUNNING_GROUP
            self._current_group = index
            logger.info("Stage %d/%d started: %s", stage, total, group.title or "-")

            self._view.header(stage, total, group.title)
            result = self._run_group(group, stage=stage, total=total)
            self._view.finish_group()

            if isinstance(result, GroupFailure):
                self._state = ManagerState.HALTED
                self._view.failure(stage, result)
                logger.info("Stage %d/%d failed at unit %r", stage, total, result.label)
                outcome.failure = StageFailure(stage=stage, title=group.title, failure=result)
                outcome.exit_code = self._settings.exit_code_on_failure
                return outcome

            outcome.completed_groups += 1
            logger.info("Stage %d/%d completed", stage, total)

        self._state = ManagerState.ALL_GROUPS_COMPLETED
        self._current_group = None
        return outcome

    def start(self) -> RunOutcome:
        """Run every group; exit the process on the first failure."""

        outcome = self.run()
        if not outcome.succeeded:
            sys.exit(outcome.exit_code)
        return outcome

    def _run_group(self, group: TaskGroup, *, stage: int, total: int) -> GroupResult:
        result_holder: list[GroupResult] = []
        error_holder: list[Exception] = []

        def _run() -> None:
            try:
                result_holder.append(group.run(self._settings.timeout_seconds))
            except Exception as exc:  # noqa: BLE001
                error_holder.append(exc)

        runner = threading.Thread(target=_run, daemon=True, name="stepwise-group")
        runner.start()

        while runner.is_alive():
            self._view.frame(group.snapshots(), stage=stage, total_stages=total, tick=self._tick)
            runner.join(timeout=self._settings.poll_interval_seconds)
            self._tick += 1
        self._view.frame(group.snapshots(), stage=stage, total_stages=total, tick=self._tick)

        if error_holder:
            raise error_holder[0]
        return result_holder[0]
