from __future__ import annotations

import threading
import time

import allure
import pytest

from stepwise.runtime import (
    ExecutionStatus,
    ExecutionUnit,
    GroupFailure,
    GroupFrozenError,
    GroupSuccess,
    StatusCell,
    TaskGroup,
)
from stepwise.runtime import group as group_module

pytestmark = [
    allure.epic("Execution Runtime"),
    allure.feature("Task Group"),
]


def _complete_after(delay: float):
    def _work(cell: StatusCell) -> None:
        time.sleep(delay)
        cell.complete()

    return _work


def _fail_after(delay: float):
    def _work(cell: StatusCell) -> None:
        time.sleep(delay)
        cell.fail()

    return _work


def _wait_then(gate: threading.Event, *, fail: bool):
    def _work(cell: StatusCell) -> None:
        gate.wait(5)
        if fail:
            cell.fail()
        else:
            cell.complete()

    return _work


def test_group_succeeds_when_every_unit_completes() -> None:
    group = TaskGroup("Build")
    group.add("compile", _complete_after(0.02))
    group.add("bundle", _complete_after(0.01))

    result = group.run()

    assert result == GroupSuccess(unit_count=2)
    assert result.ok
    assert [unit.current_status() for unit in group.units] == [ExecutionStatus.COMPLETED] * 2


def test_empty_group_succeeds_immediately() -> None:
    assert TaskGroup("Nothing").run() == GroupSuccess(unit_count=0)


def test_group_dispatches_units_concurrently() -> None:
    barrier = threading.Barrier(3, timeout=5)

    def _work(cell: StatusCell) -> None:
        barrier.wait()
        cell.complete()

    group = TaskGroup()
    for label in ("a", "b", "c"):
        group.add(label, _work)

    assert group.run(timeout_seconds=5).ok


def test_group_reports_failure_without_waiting_for_slow_sibling() -> None:
    gate = threading.Event()
    group = TaskGroup("Deploy")
    group.add("slow", _wait_then(gate, fail=False))
    group.add("broken", _fail_after(0))

    started = time.monotonic()
    result = group.run()
    elapsed = time.monotonic() - started
    gate.set()

    assert result == GroupFailure(
        label="broken",
        index=1,
        status=ExecutionStatus.FAILED,
        reason="failed",
    )
    assert elapsed < 2


def test_group_cites_lowest_index_among_failed_units(monkeypatch: pytest.MonkeyPatch) -> None:
    # Only the periodic re-check wakes the group, so both failures land before it looks.
    monkeypatch.setattr(group_module, "_WAIT_SLICE_SECONDS", 0.3)
    monkeypatch.setattr(TaskGroup, "_on_status_change", lambda self, _status: None)
    gate = threading.Event()
    group = TaskGroup()
    group.add("first", _wait_then(gate, fail=True))
    group.add("second", _wait_then(gate, fail=True))
    group.add("third", _wait_then(gate, fail=False))
    threading.Timer(0.05, gate.set).start()

    result = group.run()

    assert result == GroupFailure(
        label="first",
        index=0,
        status=ExecutionStatus.FAILED,
        reason="failed",
    )


def test_group_reports_incomplete_unit_as_failure() -> None:
    group = TaskGroup()
    group.add("forgetful", lambda _cell: None)

    result = group.run()

    assert isinstance(result, GroupFailure)
    assert result.status == ExecutionStatus.INCOMPLETE
    assert result.reason == "incomplete"


def test_group_timeout_cites_first_unfinished_unit() -> None:
    gate = threading.Event()
    group = TaskGroup()
    group.add("quick", _complete_after(0))
    group.add("hung", _wait_then(gate, fail=False))

    result = group.run(timeout_seconds=0.1)
    gate.set()

    assert result == GroupFailure(
        label="hung",
        index=1,
        status=ExecutionStatus.RUNNING,
        reason="timeout",
    )


def test_group_rejects_units_after_start() -> None:
    group = TaskGroup("Frozen")
    group.add("only", _complete_after(0))
    group.run()

    with pytest.raises(GroupFrozenError, match="already started"):
        group.add_unit(ExecutionUnit("late", _complete_after(0)))
    assert [unit.label for unit in group.units] == ["only"]


def test_group_cannot_run_twice() -> None:
    group = TaskGroup()
    group.add("only", _complete_after(0))
    group.run()

    with pytest.raises(GroupFrozenError):
        group.run()


def test_group_preserves_insertion_order() -> None:
    group = TaskGroup()
    for label in ("one", "two", "three"):
        group.add(label, _complete_after(0))

    assert [snapshot.label for snapshot in group.snapshots()] == ["one", "two", "three"]
    assert len(group) == 3


def test_group_without_timeout_fails_when_unit_calls_sys_exit() -> None:
    def _exits(_cell: StatusCell) -> None:
        raise SystemExit(2)

    group = TaskGroup()
    group.add("exits", _exits)

    started = time.monotonic()
    result = group.run()

    assert result == GroupFailure(
        label="exits",
        index=0,
        status=ExecutionStatus.FAILED,
        reason="failed",
    )
    assert time.monotonic() - started < 2
