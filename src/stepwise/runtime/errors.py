"""Exceptions raised on contract violations of the runtime API."""

from __future__ import annotations


class StepwiseError(Exception):
    """Base class for all stepwise errors."""


class ProgrammingError(StepwiseError, RuntimeError):
    """API used out of contract; never a recoverable runtime condition."""


class AlreadyDispatchedError(ProgrammingError):
    """Unit work function was already handed to a worker."""

    def __init__(self, label: str) -> None:
        super().__init__(f"Execution unit {label!r} was already dispatched.")
        self.label = label


class NotDispatchedError(ProgrammingError):
    """Operation requires a dispatched unit."""

    def __init__(self, label: str) -> None:
        super().__init__(f"Execution unit {label!r} has not been dispatched.")
        self.label = label


class GroupFrozenError(ProgrammingError):
    """Task group already started executing."""


class ManagerStartedError(ProgrammingError):
    """Progress manager already started."""


class InvalidTransitionError(ProgrammingError):
    """Status write would move a unit backwards or out of a terminal state."""

    def __init__(self, current: object, requested: object) -> None:
        super().__init__(f"Invalid status transition: {current} -> {requested}.")
        self.current = current
        self.requested = requested
