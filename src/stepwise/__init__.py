"""Terminal runtime for staged, concurrently executed work units."""

from stepwise.runtime import (
    ExecutionStatus,
    ExecutionUnit,
    ProgressManager,
    StatusCell,
    TaskGroup,
)

__version__ = "0.1.0"

__all__ = [
    "ExecutionStatus",
    "ExecutionUnit",
    "ProgressManager",
    "StatusCell",
    "TaskGroup",
    "__version__",
]
