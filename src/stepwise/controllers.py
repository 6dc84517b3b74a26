"""CLI controller: builds progress managers for the ``stepwise`` commands."""

from __future__ import annotations

import logging
import shlex
import subprocess
import time
from collections.abc import Sequence
from dataclasses import dataclass, replace

from stepwise.config import Settings
from stepwise.runtime import ProgressManager, RunOutcome, StatusCell, TerminalView
from stepwise.runtime.unit import WorkFn

logger = logging.getLogger(__name__)

COMMAND_SEPARATOR = ";;"

DEMO_STAGES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Prepare", ("Resolve configuration", "Check credentials", "Lock release slot")),
    ("Build", ("Compile sources", "Bundle assets", "Build container image")),
    ("Deploy", ("Push image", "Migrate database", "Roll out service")),
    ("Verify", ("Smoke test", "Release lock")),
)


@dataclass(slots=True)
class RunOptions:
    """Options shared by every command that runs stages."""

    poll_interval_ms: int | None = None
    timeout_seconds: float | None = None
    color: bool | None = None


@dataclass(slots=True)
class DemoCommand:
    """CLI input for the simulated deployment."""

    options: RunOptions
    fail_stage: int | None = None
    delay_seconds: float = 0.4


@dataclass(slots=True)
class ExecCommand:
    """CLI input for running shell commands as stages."""

    options: RunOptions
    stages: tuple[str, ...] = ()
    titles: tuple[str, ...] = ()


class StepwiseCliController:
    """CLI controller for staged runs."""

    def __init__(self, view: TerminalView | None = None) -> None:
        self._view = view

    def run_demo(self, command: DemoCommand) -> RunOutcome:
        """Run the simulated deployment, failing the last unit of ``fail_stage``."""

        if command.fail_stage is not None and not 1 <= command.fail_stage <= len(DEMO_STAGES):
            raise ValueError(f"--fail-stage must be between 1 and {len(DEMO_STAGES)}.")

        manager = self._manager(command.options)
        for stage, (title, labels) in enumerate(DEMO_STAGES, start=1):
            group = manager.group(title)
            for position, label in enumerate(labels):
                fail = stage == command.fail_stage and position == len(labels) - 1
                delay = command.delay_seconds * (1 + position * 0.5)
                group.add(label, _simulated_work(delay, fail=fail))
        return manager.run()

    def run_exec(self, command: ExecCommand) -> RunOutcome:
        """Run each ``--stage`` as a group of concurrently executed commands."""

        if not command.stages:
            raise ValueError("At least one --stage is required.")

        manager = self._manager(command.options)
        for index, stage in enumerate(command.stages):
            commands = parse_stage(stage)
            title = command.titles[index] if index < len(command.titles) else ""
            group = manager.group(title)
            for line in commands:
                group.add(line, _command_work(shlex.split(line)))
        return manager.run()

    def _manager(self, options: RunOptions) -> ProgressManager:
        settings = Settings.from_env()
        if options.poll_interval_ms is not None:
            settings = replace(settings, poll_interval_ms=options.poll_interval_ms)
        if options.timeout_seconds is not None:
            settings = replace(settings, unit_timeout_seconds=options.timeout_seconds)
        if options.color is not None:
            settings = replace(settings, color=options.color)
        settings.validate()
        return ProgressManager(settings=settings, view=self._view)


def parse_stage(stage: str) -> list[str]:
    """Split one ``--stage`` value into its non-empty commands."""

    commands = [part.strip() for part in stage.split(COMMAND_SEPARATOR)]
    commands = [part for part in commands if part]
    if not commands:
        raise ValueError(f"Stage {stage!r} contains no commands.")
    for line in commands:
        if not shlex.split(line):
            raise ValueError(f"Stage command {line!r} is empty.")
    return commands


def _simulated_work(delay_seconds: float, *, fail: bool) -> WorkFn:
    def _work(cell: StatusCell) -> None:
        time.sleep(delay_seconds)
        if fail:
            cell.fail()
        else:
            cell.complete()

    return _work


def _command_work(argv: Sequence[str]) -> WorkFn:
    def _work(cell: StatusCell) -> None:
        try:
            process = subprocess.run(  # noqa: S603
                list(argv),
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as error:
            logger.error("Command %r could not start: %s", argv[0], error)
            cell.fail()
            return

        if process.returncode != 0:
            logger.error(
                "Command %r exited with code %d: %s",
                " ".join(argv),
                process.returncode,
                process.stderr.strip()[-500:],
            )
            cell.fail()
            return
        cell.complete()

    return _work
