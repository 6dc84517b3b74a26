"""Domain models for unit lifecycle and group/run results."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ExecutionStatus(str, Enum):
    """Unit lifecycle states."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    # Written by the runtime when a work function returns without a terminal state.
    INCOMPLETE = "incomplete"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL

    @property
    def is_failure(self) -> bool:
        return self in (ExecutionStatus.FAILED, ExecutionStatus.INCOMPLETE)


_TERMINAL = frozenset(
    {ExecutionStatus.COMPLETED, ExecutionStatus.FAILED, ExecutionStatus.INCOMPLETE},
)


class ManagerState(str, Enum):
    """Progress manager run states."""

    IDLE = "idle"
    RUNNING_GROUP = "running_group"
    ALL_GROUPS_COMPLETED = "all_groups_completed"
    HALTED = "halted"


@dataclass(frozen=True, slots=True)
class UnitSnapshot:
    """Point-in-time view of one unit, as consumed by the renderer."""

    label: str
    status: ExecutionStatus


@dataclass(frozen=True, slots=True)
class GroupSuccess:
    """Every unit of the group completed."""

    unit_count: int = 0

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class GroupFailure:
    """First failed unit of a group, by insertion order."""

    label: str
    index: int
    status: ExecutionStatus
    reason: str = "failed"

    @property
    def ok(self) -> bool:
        return False


GroupResult = GroupSuccess | GroupFailure


@dataclass(frozen=True, slots=True)
class StageFailure:
    """Group failure annotated with the 1-based stage position."""

    stage: int
    title: str
    failure: GroupFailure


@dataclass(slots=True)
class RunOutcome:
    """Result of running every group of a progress manager."""

    total_groups: int
    completed_groups: int = 0
    failure: StageFailure | None = None
    exit_code: int = 0

    @property
    def succeeded(self) -> bool:
        return self.failure is None
