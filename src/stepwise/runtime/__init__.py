"""Three-tier execution runtime: units, groups, and the progress manager."""

from stepwise.runtime.cell import StatusCell
from stepwise.runtime.errors import (
    AlreadyDispatchedError,
    GroupFrozenError,
    InvalidTransitionError,
    ManagerStartedError,
    NotDispatchedError,
    ProgrammingError,
    StepwiseError,
)
from stepwise.runtime.group import TaskGroup
from stepwise.runtime.manager import ProgressManager
from stepwise.runtime.models import (
    ExecutionStatus,
    GroupFailure,
    GroupResult,
    GroupSuccess,
    ManagerState,
    RunOutcome,
    StageFailure,
    UnitSnapshot,
)
from stepwise.runtime.unit import ExecutionUnit, WorkFn
from stepwise.runtime.view import TerminalView

__all__ = [
    "AlreadyDispatchedError",
    "ExecutionStatus",
    "ExecutionUnit",
    "GroupFailure",
    "GroupFrozenError",
    "GroupResult",
    "GroupSuccess",
    "InvalidTransitionError",
    "ManagerStartedError",
    "ManagerState",
    "NotDispatchedError",
    "ProgrammingError",
    "ProgressManager",
    "RunOutcome",
    "StageFailure",
    "StatusCell",
    "StepwiseError",
    "TaskGroup",
    "TerminalView",
    "UnitSnapshot",
    "WorkFn",
]
