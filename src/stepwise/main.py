"""CLI entrypoint for stepwise."""

from __future__ import annotations

import logging

import rich_click as click

from stepwise import __version__
from stepwise.controllers import (
    DEMO_STAGES,
    DemoCommand,
    ExecCommand,
    RunOptions,
    StepwiseCliController,
)
from stepwise.runtime import RunOutcome

click.rich_click.USE_MARKDOWN = True
CONTROLLER = StepwiseCliController()


def _run_options(function):
    function = click.option(
        "--verbose",
        is_flag=True,
        default=False,
        help="Log runtime events to stderr.",
    )(function)
    function = click.option(
        "--color/--no-color",
        default=None,
        help="Force colored output on or off. Auto-detected by default.",
    )(function)
    function = click.option(
        "--timeout",
        "timeout_seconds",
        type=click.FloatRange(min=0),
        default=None,
        help="Fail a stage whose units are still running after this many seconds.",
    )(function)
    return click.option(
        "--poll-interval-ms",
        type=click.IntRange(min=1),
        default=None,
        help="Render loop interval in milliseconds (default 100).",
    )(function)


@click.group()
@click.version_option(version=__version__, prog_name="stepwise")
def stepwise() -> None:
    """Run staged work with a live terminal status view."""


@stepwise.command("demo")
@click.option(
    "--fail-stage",
    type=click.IntRange(min=1, max=len(DEMO_STAGES)),
    default=None,
    help="Make the last unit of this stage fail.",
)
@click.option(
    "--delay",
    "delay_seconds",
    type=click.FloatRange(min=0),
    default=0.4,
    show_default=True,
    help="Base duration of a simulated unit, in seconds.",
)
@_run_options
@click.pass_context
def demo(  # noqa: PLR0913
    ctx: click.Context,
    fail_stage: int | None,
    delay_seconds: float,
    poll_interval_ms: int | None,
    timeout_seconds: float | None,
    color: bool | None,
    verbose: bool,
) -> None:
    """Simulate a multi-stage deployment."""

    _configure_logging(verbose=verbose)
    outcome = _guarded(
        CONTROLLER.run_demo,
        DemoCommand(
            options=RunOptions(
                poll_interval_ms=poll_interval_ms,
                timeout_seconds=timeout_seconds,
                color=color,
            ),
            fail_stage=fail_stage,
            delay_seconds=delay_seconds,
        ),
    )
    ctx.exit(outcome.exit_code)


@stepwise.command("exec")
@click.option(
    "--stage",
    "stages",
    multiple=True,
    required=True,
    help="Commands of one stage, separated by `;;`. Can be repeated; stages run in order.",
)
@click.option(
    "--title",
    "titles",
    multiple=True,
    help="Stage title, matched to --stage by position. Can be repeated.",
)
@_run_options
@click.pass_context
def exec_stages(  # noqa: PLR0913
    ctx: click.Context,
    stages: tuple[str, ...],
    titles: tuple[str, ...],
    poll_interval_ms: int | None,
    timeout_seconds: float | None,
    color: bool | None,
    verbose: bool,
) -> None:
    """Run shell commands stage by stage, concurrently within a stage."""

    _configure_logging(verbose=verbose)
    outcome = _guarded(
        CONTROLLER.run_exec,
        ExecCommand(
            options=RunOptions(
                poll_interval_ms=poll_interval_ms,
                timeout_seconds=timeout_seconds,
                color=color,
            ),
            stages=stages,
            titles=titles,
        ),
    )
    ctx.exit(outcome.exit_code)


def _guarded(run, command) -> RunOutcome:
    try:
        return run(command)
    except ValueError as error:
        raise click.ClickException(str(error)) from error


def _configure_logging(*, verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
    )


if __name__ == "__main__":  # pragma: no cover
    stepwise()
