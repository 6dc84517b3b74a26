"""Terminal view: writes rendered frames to a stream."""

from __future__ import annotations

import shutil
import sys
from collections.abc import Sequence
from typing import TextIO

import click

from stepwise.runtime.models import GroupFailure, UnitSnapshot
from stepwise.runtime.render import (
    redraw,
    render_failure,
    render_group_lines,
    render_header,
)


class TerminalView:
    """Live redraw on a TTY, append-only terminal lines everywhere else.

    In non-interactive mode each unit is printed once, when it reaches a
    terminal state, so logs and CI output carry no spinner noise.
    """

    def __init__(
        self,
        stream: TextIO | None = None,
        *,
        color: bool | None = None,
        interactive: bool | None = None,
        err_stream: TextIO | None = None,
        width: int | None = None,
    ) -> None:
        self._stream = stream if stream is not None else sys.stdout
        self._err_stream = err_stream
        is_tty = _isatty(self._stream)
        self.interactive = is_tty if interactive is None else interactive
        self.color = is_tty if color is None else color
        self._width = width
        self._lines_on_screen = 0
        self._printed: set[int] = set()

    def header(self, stage: int, total_stages: int, title: str) -> None:
        self._write(render_header(stage, total_stages, title, color=self.color) + "\n")

    def frame(
        self,
        snapshots: Sequence[UnitSnapshot],
        *,
        stage: int,
        total_stages: int,
        tick: int,
    ) -> None:
        lines = render_group_lines(
            snapshots,
            stage=stage,
            total_stages=total_stages,
            tick=tick,
            color=self.color,
            width=self._columns() if self.interactive else None,
        )
        if self.interactive:
            self._write(redraw(self._lines_on_screen, lines))
            self._lines_on_screen = max(self._lines_on_screen, len(lines))
            return

        for index, (snapshot, line) in enumerate(zip(snapshots, lines, strict=True)):
            if snapshot.status.is_terminal and index not in self._printed:
                self._printed.add(index)
                self._write(line + "\n")

    def finish_group(self) -> None:
        self._lines_on_screen = 0
        self._printed.clear()

    def failure(self, stage: int, failure: GroupFailure) -> None:
        click.echo(
            render_failure(stage, failure, color=self.color),
            file=self._err_stream,
            err=self._err_stream is None,
            color=self.color,
        )

    def _columns(self) -> int:
        # Lines must not wrap, or the cursor-up count no longer matches the rows.
        if self._width is not None:
            return self._width
        return shutil.get_terminal_size().columns

    def _write(self, text: str) -> None:
        self._stream.write(text)
        self._stream.flush()


def _isatty(stream: TextIO) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())
